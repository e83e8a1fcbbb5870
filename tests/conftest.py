"""Shared fixtures for the job tracker tests."""

import pytest

from core.config import get_settings
from core.models import CalculationResults, Job


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Every test starts from built-in defaults, not data/settings.json."""
    monkeypatch.setenv("FOAM_SETTINGS_PATH", str(tmp_path / "missing.json"))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_job():
    def _make(**fields) -> Job:
        return Job.model_validate({"id": "job-1", **fields})
    return _make


@pytest.fixture
def totals() -> CalculationResults:
    return CalculationResults(
        total_wall_area=1200,
        total_roof_area=0,
        wall_bd_ft=4200,
        open_cell_sets=2.5,
        closed_cell_sets=0,
        open_cell_strokes=16500,
        material_cost=300,
        labor_cost=500,
        misc_expenses=50,
        total_cost=1000,
    )
