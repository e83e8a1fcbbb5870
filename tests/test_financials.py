import pytest

from core.config import Costs
from core.financials import compute_financials

COSTS = Costs(open_cell=2000, closed_cell=2500, labor_rate=50)


def test_actuals_drive_the_numbers(make_job):
    job = make_job(
        status="Invoiced",
        totalValue=10000,
        materials={"openCellSets": 3, "closedCellSets": 1},
        expenses={"manHours": 20, "tripCharge": 100, "fuelSurcharge": 25},
        actuals={
            "openCellSets": 2,
            "closedCellSets": 1,
            "laborHours": 16,
            "inventory": [{"name": "tape", "quantity": 4, "unitCost": 10}],
        },
    )
    fin = compute_financials(job, COSTS)

    assert fin.chemical_cost == 2 * 2000 + 1 * 2500
    assert fin.labor_cost == 16 * 50
    assert fin.inventory_cost == 40
    assert fin.misc_cost == 125
    assert fin.total_cogs == 6500 + 800 + 40 + 125
    assert fin.net_profit == 10000 - fin.total_cogs
    assert fin.margin == pytest.approx(fin.net_profit / 10000)


def test_estimate_is_used_without_actuals(make_job):
    job = make_job(
        totalValue=5000,
        materials={"openCellSets": 1, "inventory": [{"quantity": 2, "unitCost": 15}]},
        expenses={"manHours": 10, "laborRate": 70},
    )
    fin = compute_financials(job, COSTS)

    assert fin.chemical_cost == 2000
    assert fin.labor_cost == 700
    assert fin.inventory_cost == 30


def test_zero_recorded_hours_fall_back_to_estimate(make_job):
    job = make_job(expenses={"manHours": 8}, actuals={"laborHours": 0})
    assert compute_financials(job, COSTS).labor_cost == 400


def test_zero_revenue_gives_zero_margin(make_job):
    fin = compute_financials(make_job(materials={"openCellSets": 1}), COSTS)
    assert fin.revenue == 0
    assert fin.margin == 0
    assert fin.net_profit == -2000


def test_uses_configured_costs_by_default(make_job, tmp_path, monkeypatch):
    from core.config import get_settings

    path = tmp_path / "settings.json"
    path.write_text('{"costs": {"open_cell": 1000}}', encoding="utf-8")
    monkeypatch.setenv("FOAM_SETTINGS_PATH", str(path))
    get_settings.cache_clear()

    fin = compute_financials(make_job(materials={"openCellSets": 2}))
    assert fin.chemical_cost == 2000
