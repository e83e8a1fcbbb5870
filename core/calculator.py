from __future__ import annotations

from typing import Optional

import structlog

from .config import Settings, get_settings
from .models import (
    FOAM_FAMILIES,
    ActualUsage,
    CalculationResults,
    FamilyMetrics,
    FoamFamily,
    Job,
    JobActuals,
    JobMaterials,
    MarginBreakdown,
    MetricsView,
    ScopeLine,
)
from .rules import margin_pct

logger = structlog.get_logger()


def compute_margin(totals: CalculationResults) -> MarginBreakdown:
    """Profit and margin %, unrounded. Margin is 0 for a non-positive total."""
    costs = totals.material_cost + totals.labor_cost + totals.misc_expenses
    profit = totals.total_cost - costs
    return MarginBreakdown(profit=profit, margin=margin_pct(profit, totals.total_cost))


def resolve_consumption_rate(
    materials: Optional[JobMaterials],
    family: FoamFamily,
    default: Optional[float] = None,
) -> float:
    """Strokes per set for `family`: the job override if positive, else the default."""
    override = None
    if materials is not None:
        override = materials.oc_strokes_per_set if family == "open_cell" else materials.cc_strokes_per_set
    if override is not None and override > 0:
        return float(override)

    if default is None:
        yields = get_settings().yields
        default = yields.open_cell_strokes if family == "open_cell" else yields.closed_cell_strokes
    return float(default)


def select_visible_families(totals: CalculationResults) -> list[FoamFamily]:
    return [f for f in FOAM_FAMILIES if _estimated_sets(totals, f) > 0]


def reconcile_actuals(actuals: Optional[JobActuals], family: FoamFamily) -> bool:
    """True when the crew recorded some usage (sets or strokes) for `family`."""
    usage = _actual_usage(actuals, family)
    return usage is not None and (usage.sets > 0 or usage.strokes > 0)


def _estimated_sets(totals: CalculationResults, family: FoamFamily) -> float:
    return totals.open_cell_sets if family == "open_cell" else totals.closed_cell_sets


def _estimated_strokes(totals: CalculationResults, family: FoamFamily) -> float:
    return totals.open_cell_strokes if family == "open_cell" else totals.closed_cell_strokes


def _actual_usage(actuals: Optional[JobActuals], family: FoamFamily) -> Optional[ActualUsage]:
    if actuals is None:
        return None
    if family == "open_cell":
        return ActualUsage(family=family, sets=actuals.open_cell_sets, strokes=actuals.open_cell_strokes or 0)
    return ActualUsage(family=family, sets=actuals.closed_cell_sets, strokes=actuals.closed_cell_strokes or 0)


def _scope(job: Job, totals: CalculationResults) -> list[ScopeLine]:
    lines: list[ScopeLine] = []
    if totals.total_wall_area > 0:
        lines.append(ScopeLine(
            area="walls",
            foam_type=job.wall_settings.type,
            thickness=job.wall_settings.thickness,
            sqft=totals.total_wall_area,
            bd_ft=totals.wall_bd_ft,
        ))
    if totals.total_roof_area > 0:
        lines.append(ScopeLine(
            area="roof",
            foam_type=job.roof_settings.type,
            thickness=job.roof_settings.thickness,
            sqft=totals.total_roof_area,
            bd_ft=totals.roof_bd_ft,
        ))
    return lines


def derive_metrics(
    job: Job,
    totals: CalculationResults,
    settings: Optional[Settings] = None,
) -> MetricsView:
    """Breakdown numbers for one job. Reads its inputs, never changes them."""
    yields = (settings or get_settings()).yields
    defaults = {"open_cell": yields.open_cell_strokes, "closed_cell": yields.closed_cell_strokes}

    margin = compute_margin(totals)
    visible = select_visible_families(totals)

    families = [
        FamilyMetrics(
            family=family,
            sets=_estimated_sets(totals, family),
            strokes=_estimated_strokes(totals, family),
            strokes_per_set=resolve_consumption_rate(job.materials, family, defaults[family]),
        )
        for family in visible
    ]

    # actuals live inside the chemical block: hidden when no family was estimated
    actuals_visible = {f: bool(visible) and reconcile_actuals(job.actuals, f) for f in FOAM_FAMILIES}
    actuals = [_actual_usage(job.actuals, f) for f in FOAM_FAMILIES if actuals_visible[f]]

    view = MetricsView(
        total_value=totals.total_cost,
        profit=margin.profit,
        margin=margin.margin,
        scope=_scope(job, totals),
        visible_families=visible,
        families=families,
        has_actuals=job.actuals is not None,
        actuals_visible=actuals_visible,
        actuals=actuals,
    )
    logger.debug("metrics_derived", job_id=job.id, margin=view.margin, families=visible)
    return view
