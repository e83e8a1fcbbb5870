from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class JobStatus(str, Enum):
    """Lifecycle position of a job. Declaration order is lifecycle order."""

    DRAFT = "Draft"
    WORK_ORDER = "Work Order"
    INVOICED = "Invoiced"
    PAID = "Paid"

    @classmethod
    def _missing_(cls, value: object) -> Optional["JobStatus"]:
        # the only alternate spelling in use
        if value == "WorkOrder":
            return cls.WORK_ORDER
        return None

    @property
    def position(self) -> int:
        return list(JobStatus).index(self)


class FoamType(str, Enum):
    OPEN_CELL = "Open Cell"
    CLOSED_CELL = "Closed Cell"


FoamFamily = Literal["open_cell", "closed_cell"]
FOAM_FAMILIES: tuple[FoamFamily, ...] = ("open_cell", "closed_cell")


class _Record(BaseModel):
    # records come from the front end in camelCase; python code uses snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- JOB RECORD ----------

class FoamSettings(_Record):
    type: FoamType = FoamType.OPEN_CELL
    thickness: float = Field(default=0, ge=0)
    waste_percentage: float = Field(default=0, ge=0)


class InventoryItem(_Record):
    name: str = ""
    quantity: float = 0
    unit: str = ""
    unit_cost: Optional[float] = None


class JobMaterials(_Record):
    open_cell_sets: float = Field(default=0, ge=0)
    closed_cell_sets: float = Field(default=0, ge=0)

    # None = use the configured default rate
    oc_strokes_per_set: Optional[float] = None
    cc_strokes_per_set: Optional[float] = None

    inventory: list[InventoryItem] = []


class OtherExpense(_Record):
    description: str = ""
    amount: float = 0


class JobExpenses(_Record):
    man_hours: float = Field(default=0, ge=0)
    labor_rate: Optional[float] = None
    trip_charge: float = 0
    fuel_surcharge: float = 0
    other: OtherExpense = OtherExpense()


class JobActuals(_Record):
    """Usage recorded by the crew when the job is completed."""

    open_cell_sets: float = 0
    closed_cell_sets: float = 0
    open_cell_strokes: Optional[int] = None
    closed_cell_strokes: Optional[int] = None

    labor_hours: float = 0
    inventory: list[InventoryItem] = []
    notes: str = ""
    completed_by: Optional[str] = None
    completion_date: Optional[str] = None


class Job(_Record):
    id: str = ""
    status: JobStatus = JobStatus.DRAFT
    scheduled_date: Optional[date] = None

    wall_settings: FoamSettings = FoamSettings()
    roof_settings: FoamSettings = FoamSettings()

    materials: Optional[JobMaterials] = None
    actuals: Optional[JobActuals] = None

    total_value: float = 0
    expenses: Optional[JobExpenses] = None

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _date_part(cls, v: object) -> object:
        # "" means "not scheduled"; datetimes keep only the date
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            head = v.replace("T", " ", 1).split(" ", 1)[0]
            for fmt in ("%Y-%m-%d", "%m/%d/%Y"):
                try:
                    return datetime.strptime(head, fmt).date()
                except ValueError:
                    continue
            raise ValueError(f"scheduled date must be YYYY-MM-DD or MM/DD/YYYY, got {v!r}")
        return v


# ---------- UPSTREAM TOTALS ----------

class CalculationResults(_Record):
    """Area and cost totals computed upstream from the estimate inputs."""

    total_wall_area: float = 0
    total_roof_area: float = 0
    wall_bd_ft: float = 0
    roof_bd_ft: float = 0

    open_cell_sets: float = 0
    closed_cell_sets: float = 0
    open_cell_strokes: float = 0
    closed_cell_strokes: float = 0

    material_cost: float = 0
    labor_cost: float = 0
    misc_expenses: float = 0
    total_cost: float = 0


# ---------- DECISIONS / DERIVED VIEWS ----------

class StepAction(str, Enum):
    MARK_SOLD = "mark_sold"
    SCHEDULE_JOB = "schedule_job"
    GENERATE_INVOICE = "generate_invoice"
    RECORD_PAYMENT = "record_payment"


class NextStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: StepAction
    label: str
    target_status: JobStatus
    # False for scheduling: the date is assigned, the status stays put
    changes_status: bool = True


StageState = Literal["complete", "current", "upcoming"]


class ProgressStage(BaseModel):
    key: str
    label: str
    state: StageState


class MarginBreakdown(BaseModel):
    profit: float
    margin: float  # percent


class ActualUsage(BaseModel):
    family: FoamFamily
    sets: float
    strokes: int


class FamilyMetrics(BaseModel):
    family: FoamFamily
    sets: float
    strokes: float
    strokes_per_set: float


class ScopeLine(BaseModel):
    area: Literal["walls", "roof"]
    foam_type: FoamType
    thickness: float
    sqft: float
    bd_ft: float


class MetricsView(BaseModel):
    total_value: float
    profit: float
    margin: float

    scope: list[ScopeLine] = []
    visible_families: list[FoamFamily] = []
    families: list[FamilyMetrics] = []

    has_actuals: bool = False
    actuals_visible: dict[FoamFamily, bool] = {}
    actuals: list[ActualUsage] = []


class Financials(BaseModel):
    revenue: float
    chemical_cost: float
    labor_cost: float
    inventory_cost: float
    misc_cost: float
    total_cogs: float
    net_profit: float
    margin: float  # fraction of revenue, not percent
