"""Close-out financials, computed when payment is recorded for a job.

Usage comes from the crew's actuals when they exist, otherwise from the
estimated materials. Chemical and labor prices come from settings unless the
job carries its own labor rate.
"""

from __future__ import annotations

from typing import Optional

import structlog

from .config import Costs, get_settings
from .models import Financials, InventoryItem, Job

logger = structlog.get_logger()


def _inventory_cost(items: list[InventoryItem]) -> float:
    return sum(float(i.quantity) * float(i.unit_cost or 0) for i in items)


def compute_financials(job: Job, costs: Optional[Costs] = None) -> Financials:
    costs = costs or get_settings().costs
    expenses = job.expenses

    if job.actuals is not None:
        oc_sets = job.actuals.open_cell_sets
        cc_sets = job.actuals.closed_cell_sets
        inventory = job.actuals.inventory
    elif job.materials is not None:
        oc_sets = job.materials.open_cell_sets
        cc_sets = job.materials.closed_cell_sets
        inventory = job.materials.inventory
    else:
        oc_sets = cc_sets = 0.0
        inventory = []

    chemical_cost = oc_sets * costs.open_cell + cc_sets * costs.closed_cell

    # recorded hours win; 0 recorded hours falls back to the estimate
    labor_hours = (job.actuals.labor_hours if job.actuals else 0) or (expenses.man_hours if expenses else 0)
    labor_rate = (expenses.labor_rate if expenses else None) or costs.labor_rate
    labor_cost = labor_hours * labor_rate

    inventory_cost = _inventory_cost(inventory)
    misc_cost = (expenses.trip_charge + expenses.fuel_surcharge) if expenses else 0.0

    revenue = job.total_value
    total_cogs = chemical_cost + labor_cost + inventory_cost + misc_cost
    net_profit = revenue - total_cogs

    result = Financials(
        revenue=revenue,
        chemical_cost=chemical_cost,
        labor_cost=labor_cost,
        inventory_cost=inventory_cost,
        misc_cost=misc_cost,
        total_cogs=total_cogs,
        net_profit=net_profit,
        margin=net_profit / revenue if revenue else 0.0,
    )
    logger.debug("financials_computed", job_id=job.id, revenue=revenue, net_profit=net_profit)
    return result
