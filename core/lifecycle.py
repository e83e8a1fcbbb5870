# core/lifecycle.py
# Which action is legal next for a job. Decision only: the caller performs it.

from __future__ import annotations

from typing import Optional, Union

import structlog

from .errors import UnrecognizedStatusError
from .models import Job, JobStatus, NextStep, ProgressStage, StepAction

logger = structlog.get_logger()

MARK_SOLD = NextStep(
    action=StepAction.MARK_SOLD, label="Mark Sold", target_status=JobStatus.WORK_ORDER
)
SCHEDULE_JOB = NextStep(
    action=StepAction.SCHEDULE_JOB,
    label="Schedule Job",
    target_status=JobStatus.WORK_ORDER,
    changes_status=False,
)
GENERATE_INVOICE = NextStep(
    action=StepAction.GENERATE_INVOICE, label="Generate Invoice", target_status=JobStatus.INVOICED
)
RECORD_PAYMENT = NextStep(
    action=StepAction.RECORD_PAYMENT, label="Record Payment", target_status=JobStatus.PAID
)

# status -> (step when unscheduled, step when scheduled); None = terminal
TRANSITIONS: dict[JobStatus, Optional[tuple[NextStep, NextStep]]] = {
    JobStatus.DRAFT: (MARK_SOLD, MARK_SOLD),
    JobStatus.WORK_ORDER: (SCHEDULE_JOB, GENERATE_INVOICE),
    JobStatus.INVOICED: (RECORD_PAYMENT, RECORD_PAYMENT),
    JobStatus.PAID: None,
}

_missing = set(JobStatus) - set(TRANSITIONS)
if _missing:
    raise RuntimeError(f"No transition entry for: {sorted(s.value for s in _missing)}")


def parse_status(status: Union[JobStatus, str]) -> JobStatus:
    try:
        return JobStatus(status)
    except ValueError:
        raise UnrecognizedStatusError(status) from None


def is_terminal(status: Union[JobStatus, str]) -> bool:
    return TRANSITIONS[parse_status(status)] is None


def resolve_step(status: Union[JobStatus, str], has_scheduled_date: bool) -> Optional[NextStep]:
    """Next legal step for a lifecycle position, or None once the job is paid.

    Raises UnrecognizedStatusError for a status outside the lifecycle.
    """
    entry = TRANSITIONS[parse_status(status)]
    if entry is None:
        return None
    unscheduled, scheduled = entry
    return scheduled if has_scheduled_date else unscheduled


def resolve_next_step(job: Job) -> Optional[NextStep]:
    step = resolve_step(job.status, job.scheduled_date is not None)
    logger.debug(
        "next_step_resolved",
        job_id=job.id,
        status=job.status.value,
        action=step.action.value if step else None,
    )
    return step


# ---------- PROGRESS TRACKER ----------

STAGES: list[tuple[str, str]] = [
    ("estimate", "Estimate"),
    ("sold", "Sold"),
    ("scheduled", "Scheduled"),
    ("invoiced", "Invoiced"),
    ("paid", "Paid"),
]


def _reached(job: Job) -> int:
    """Number of stages completed so far."""
    if job.status is JobStatus.DRAFT:
        return 0
    if job.status is JobStatus.WORK_ORDER:
        return 3 if job.scheduled_date is not None else 2
    if job.status is JobStatus.INVOICED:
        return 4
    return len(STAGES)


def job_progress(job: Job) -> list[ProgressStage]:
    reached = _reached(job)
    stages: list[ProgressStage] = []
    for idx, (key, label) in enumerate(STAGES):
        if idx < reached:
            state = "complete"
        elif idx == reached:
            state = "current"
        else:
            state = "upcoming"
        stages.append(ProgressStage(key=key, label=label, state=state))
    return stages
