from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Optional

import structlog
from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from core.calculator import derive_metrics, resolve_consumption_rate
from core.config import get_settings
from core.errors import ConfigError, JobTrackerError
from core.financials import compute_financials
from core.lifecycle import job_progress, resolve_next_step
from core.log import configure_logging
from core.models import (
    CalculationResults,
    FoamFamily,
    Financials,
    Job,
    MetricsView,
    NextStep,
    ProgressStage,
)
from core.rules import sets_from_strokes

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # settings are read at startup, not import; a bad file stops the server here
    configure_logging(get_settings().log_level)
    yield


app = FastAPI(title="Foam Job Tracker API", version="1.0.0", lifespan=lifespan)

# UI is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(JobTrackerError)
def job_tracker_error(request: Request, exc: JobTrackerError) -> JSONResponse:
    logger.warning("request_rejected", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(ConfigError)
def config_error(request: Request, exc: ConfigError) -> JSONResponse:
    logger.error("settings_invalid", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=500, content=exc.to_dict())


# ---------- REQUEST / RESPONSE BODIES ----------

class JobBody(BaseModel):
    job: Job


class MetricsBody(BaseModel):
    job: Job
    results: CalculationResults


class NextStepResponse(BaseModel):
    next_step: Optional[NextStep]
    terminal: bool


class StrokesBody(BaseModel):
    strokes: int = Field(ge=0)
    family: FoamFamily = "open_cell"
    strokes_per_set: Optional[float] = None


class SetsResponse(BaseModel):
    sets: float
    strokes_per_set: float


class JobOverview(BaseModel):
    next_step: Optional[NextStep]
    terminal: bool
    metrics: MetricsView


def _next_step(job: Job) -> NextStepResponse:
    step = resolve_next_step(job)
    return NextStepResponse(next_step=step, terminal=step is None)


# ---------- ENDPOINTS ----------

@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/next-step", response_model=NextStepResponse)
def next_step(body: JobBody) -> NextStepResponse:
    result = _next_step(body.job)
    logger.info(
        "next_step",
        job_id=body.job.id,
        status=body.job.status.value,
        action=result.next_step.action.value if result.next_step else None,
    )
    return result


@app.post("/metrics", response_model=MetricsView)
def metrics(body: MetricsBody) -> MetricsView:
    return derive_metrics(body.job, body.results)


@app.post("/progress", response_model=list[ProgressStage])
def progress(body: JobBody) -> list[ProgressStage]:
    return job_progress(body.job)


@app.post("/financials", response_model=Financials)
def financials(body: JobBody) -> Financials:
    result = compute_financials(body.job)
    logger.info("financials", job_id=body.job.id, net_profit=result.net_profit)
    return result


@app.post("/strokes/sets", response_model=SetsResponse)
def strokes_to_sets(body: StrokesBody) -> SetsResponse:
    """Sets implied by a live stroke count. Without a rate the configured default is used."""
    rate = body.strokes_per_set
    if rate is None or rate <= 0:
        rate = resolve_consumption_rate(None, body.family)
    return SetsResponse(sets=sets_from_strokes(body.strokes, rate), strokes_per_set=rate)


# ---- Whole exported estimate record (job fields + "results") in one go ----
@app.post("/job_from_payload", response_model=JobOverview)
def job_from_payload(payload: dict[str, Any] = Body(...)) -> JobOverview:
    """
    Accepts an estimate record as the front end stores it: the job fields at the
    top level and the computed totals under "results".
    """
    try:
        job = Job.model_validate(payload)
        results = CalculationResults.model_validate(payload.get("results") or {})
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid payload: {e}")

    step = _next_step(job)
    return JobOverview(
        next_step=step.next_step,
        terminal=step.terminal,
        metrics=derive_metrics(job, results),
    )
