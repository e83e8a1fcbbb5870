import math

import pytest

from core.calculator import (
    compute_margin,
    derive_metrics,
    reconcile_actuals,
    resolve_consumption_rate,
    select_visible_families,
)
from core.config import Settings, Yields
from core.models import CalculationResults, JobActuals, JobMaterials
from core.rules import sets_from_strokes


def test_margin_and_profit(totals):
    m = compute_margin(totals)
    assert m.profit == pytest.approx(150)
    assert m.margin == pytest.approx(15)


def test_zero_total_gives_zero_margin():
    m = compute_margin(CalculationResults())
    assert m.margin == 0
    assert m.profit == 0
    assert not math.isnan(m.margin)


def test_negative_total_gives_zero_margin():
    m = compute_margin(CalculationResults(total_cost=-10, material_cost=5))
    assert m.margin == 0
    assert m.profit == -15


def test_margin_is_not_rounded():
    m = compute_margin(CalculationResults(total_cost=3, material_cost=1))
    assert m.margin == pytest.approx(200 / 3)


@pytest.mark.parametrize("override", [None, 0, -50])
def test_rate_falls_back_to_default(override):
    materials = JobMaterials(oc_strokes_per_set=override, cc_strokes_per_set=override)
    assert resolve_consumption_rate(materials, "open_cell") == 6600
    assert resolve_consumption_rate(materials, "closed_cell") == 6600


def test_rate_without_materials():
    assert resolve_consumption_rate(None, "closed_cell") == 6600


def test_rate_uses_positive_override():
    materials = JobMaterials(oc_strokes_per_set=6400, cc_strokes_per_set=None)
    assert resolve_consumption_rate(materials, "open_cell") == 6400
    assert resolve_consumption_rate(materials, "closed_cell") == 6600


def test_rate_explicit_default_wins_over_settings():
    assert resolve_consumption_rate(None, "open_cell", default=7000) == 7000


def test_visible_families():
    totals = CalculationResults(open_cell_sets=0, closed_cell_sets=2.5)
    assert select_visible_families(totals) == ["closed_cell"]
    assert select_visible_families(CalculationResults()) == []


def test_reconcile_actuals():
    assert reconcile_actuals(None, "open_cell") is False

    actuals = JobActuals(open_cell_sets=0, open_cell_strokes=None, closed_cell_sets=1.2)
    assert reconcile_actuals(actuals, "open_cell") is False
    assert reconcile_actuals(actuals, "closed_cell") is True

    strokes_only = JobActuals(open_cell_sets=0, open_cell_strokes=1500)
    assert reconcile_actuals(strokes_only, "open_cell") is True


def test_derive_metrics(make_job, totals):
    job = make_job(
        status="Work Order",
        wallSettings={"type": "Open Cell", "thickness": 3.5},
        materials={"ocStrokesPerSet": 6400},
    )
    view = derive_metrics(job, totals)

    assert view.profit == pytest.approx(150)
    assert view.margin == pytest.approx(15)
    assert view.visible_families == ["open_cell"]
    assert len(view.families) == 1
    fam = view.families[0]
    assert fam.sets == 2.5
    assert fam.strokes == 16500
    assert fam.strokes_per_set == 6400

    assert [line.area for line in view.scope] == ["walls"]
    assert view.scope[0].thickness == 3.5

    assert view.has_actuals is False
    assert view.actuals == []
    assert view.actuals_visible == {"open_cell": False, "closed_cell": False}


def test_derive_metrics_actuals_per_family(make_job, totals):
    job = make_job(
        status="Work Order",
        actuals={"openCellSets": 0, "closedCellSets": 0.8, "closedCellStrokes": 5300},
    )
    view = derive_metrics(job, totals)

    assert view.has_actuals is True
    assert view.actuals_visible == {"open_cell": False, "closed_cell": True}
    assert len(view.actuals) == 1
    assert view.actuals[0].family == "closed_cell"
    assert view.actuals[0].strokes == 5300


def test_derive_metrics_uses_settings_yields(make_job, totals):
    settings = Settings(yields=Yields(open_cell_strokes=7200))
    view = derive_metrics(make_job(), totals, settings)
    assert view.families[0].strokes_per_set == 7200


def test_derive_metrics_leaves_inputs_untouched(make_job, totals):
    job = make_job(status="Invoiced", materials={"ocStrokesPerSet": 0})
    before_job = job.model_dump_json()
    before_totals = totals.model_dump_json()

    first = derive_metrics(job, totals)
    second = derive_metrics(job, totals)

    assert first.model_dump_json() == second.model_dump_json()
    assert job.model_dump_json() == before_job
    assert totals.model_dump_json() == before_totals


@pytest.mark.parametrize(
    "strokes, rate, expected",
    [(13200, 6600, 2.0), (1000, 6600, 0.15), (0, 6600, 0.0), (500, 0, 0.0)],
)
def test_sets_from_strokes(strokes, rate, expected):
    assert sets_from_strokes(strokes, rate) == expected


def test_actuals_hidden_when_nothing_estimated(make_job):
    job = make_job(status="Paid", actuals={"openCellSets": 1.4, "openCellStrokes": 9200})
    view = derive_metrics(job, CalculationResults(total_cost=500))

    assert view.visible_families == []
    assert view.has_actuals is True
    assert view.actuals == []
    assert view.actuals_visible == {"open_cell": False, "closed_cell": False}
