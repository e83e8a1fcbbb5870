"""Quick runtime checks for Foam Job Tracker.
Run: python scripts/quickcheck.py
Exits with code 0 on success, non-zero on failure.
"""
from core.calculator import derive_metrics
from core.config import Settings
from core.lifecycle import resolve_next_step
from core.models import CalculationResults, Job, StepAction


def approx(a, b, tol=1e-6):
    return abs(a - b) <= tol


def main():
    job = Job.model_validate({"id": "qc-1", "status": "Work Order", "scheduledDate": "2025-03-04"})
    results = CalculationResults(
        material_cost=300,
        labor_cost=500,
        misc_expenses=50,
        total_cost=1000,
        open_cell_sets=2.5,
        open_cell_strokes=16500,
    )

    step = resolve_next_step(job)
    assert step is not None and step.action is StepAction.GENERATE_INVOICE

    view = derive_metrics(job, results, Settings())

    assert approx(view.profit, 150.0)
    assert approx(view.margin, 15.0)
    assert view.visible_families == ["open_cell"]
    assert approx(view.families[0].sets, 2.5)
    assert approx(view.families[0].strokes_per_set, 6600.0)

    print("Quickcheck OK")


if __name__ == '__main__':
    main()
