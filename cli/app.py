# cli/app.py
# CLI = a thin terminal UI over core. Can be swapped for Web/mobile without touching core.

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from core.calculator import derive_metrics, resolve_consumption_rate
from core.config import get_settings
from core.errors import JobTrackerError
from core.financials import compute_financials
from core.lifecycle import job_progress, resolve_next_step
from core.log import configure_logging
from core.models import FOAM_FAMILIES, CalculationResults, Job, JobStatus, MetricsView
from core.rules import sets_from_strokes

logger = structlog.get_logger()

FAMILY_LABELS = {"open_cell": "Open Cell", "closed_cell": "Closed Cell"}


# ---------- INPUT HELPERS ----------

def ask_float(prompt: str, *, min_value: float | None = None) -> float:
    """Keeps asking until a number is entered."""
    while True:
        raw = input(prompt).strip().replace(",", ".")
        try:
            value = float(raw)
        except ValueError:
            print("❌ Enter a number (example: 1250)")
            continue
        if min_value is not None and value < min_value:
            print(f"❌ Value must be >= {min_value}")
            continue
        return value


def ask_yes_no(prompt: str) -> bool:
    while True:
        raw = input(prompt + " (y/n): ").strip().lower()
        if raw in ("y", "yes"):
            return True
        if raw in ("n", "no"):
            return False
        print("❌ Enter y or n")


def money(x: float) -> str:
    return f"${x:,.2f}"


# ---------- LOADING ----------

def load_job_file(path: Path) -> tuple[Job, CalculationResults]:
    """
    Reads a saved job. Two shapes are accepted:
    {"job": {...}, "results": {...}} or an exported estimate record with "results" inside.
    """
    raw: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    job_raw = raw.get("job", raw)
    results_raw = raw.get("results") or job_raw.get("results") or {}
    return Job.model_validate(job_raw), CalculationResults.model_validate(results_raw)


# ---------- HISTORY (JSON) ----------

def save_report_json(payload: dict) -> Path:
    """Writes the report to data/history/ and returns its path."""
    root = Path(__file__).resolve().parents[1]
    history_dir = root / "data" / "history"
    history_dir.mkdir(parents=True, exist_ok=True)

    ts = payload["meta"]["created_at"].replace(":", "").replace("-", "")
    job_id = payload["meta"]["job_id"] or "job"
    status = payload["meta"]["status"].lower().replace(" ", "_")

    path = history_dir / f"{ts}_{job_id}_{status}.json"
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


# ---------- OUTPUT ----------

def print_breakdown(view: MetricsView) -> None:
    print("\n--- Breakdown ---")
    print(f"Total value:           {money(view.total_value)}")
    print(f"Profit:                {money(view.profit)}")
    print(f"Margin:                {view.margin:.1f}%")

    for line in view.scope:
        print(
            f"{line.area.title():<22} {line.sqft:,.0f} sqft / {line.bd_ft:,.0f} bdft"
            f"  ({line.foam_type.value} @ {line.thickness}\")"
        )

    for fam in view.families:
        print(
            f"{FAMILY_LABELS[fam.family]:<22} {fam.sets:.2f} sets  ~{fam.strokes:,.0f} strokes"
            f"  ({fam.strokes_per_set:,.0f} strokes/set)"
        )

    if view.actuals:
        print("\nActuals:")
        for usage in view.actuals:
            print(f" - {FAMILY_LABELS[usage.family]}: {usage.sets:.2f} sets / {usage.strokes:,} strokes")

    print("-----------------\n")


# ---------- MAIN CLI FLOW ----------

def run_cli(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    configure_logging(settings.log_level)

    print("\n=== Foam Job Tracker (CLI) ===\n")

    raw_path = argv[0] if argv else input("Job file (JSON): ").strip()
    path = Path(raw_path)
    if not path.exists():
        print(f"❌ File not found: {path}")
        return 1

    try:
        job, results = load_job_file(path)
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"❌ Could not read job: {e}")
        return 1

    try:
        step = resolve_next_step(job)
    except JobTrackerError as e:
        print(f"❌ {e.message}")
        return 1
    view = derive_metrics(job, results, settings)
    logger.info("job_loaded", job_id=job.id, status=job.status.value)

    print(f"Job:                   {job.id or '(no id)'}")
    print(f"Status:                {job.status.value}")
    if job.scheduled_date:
        print(f"Scheduled:             {job.scheduled_date.isoformat()}")

    marks = {"complete": "[x]", "current": "[>]", "upcoming": "[ ]"}
    print("Progress:              " + "  ".join(f"{marks[s.state]} {s.label}" for s in job_progress(job)))

    if step is None:
        print("Next step:             (job closed)")
    else:
        print(f"Next step:             {step.label}")

    print_breakdown(view)

    if job.status is JobStatus.PAID:
        fin = compute_financials(job, settings.costs)
        print("--- Close-out ---")
        print(f"Revenue:               {money(fin.revenue)}")
        print(f"COGS:                  {money(fin.total_cogs)}")
        print(f"Net profit:            {money(fin.net_profit)}")
        print(f"Margin:                {fin.margin * 100:.1f}%")
        print("-----------------\n")

    # --- Live counter -> sets ---
    live_sets: dict[str, float] = {}
    if job.status is JobStatus.WORK_ORDER and ask_yes_no("Convert live stroke counts to sets?"):
        for family in FOAM_FAMILIES:
            strokes = ask_float(f"{FAMILY_LABELS[family]} strokes: ", min_value=0)
            rate = resolve_consumption_rate(job.materials, family)
            live_sets[family] = sets_from_strokes(strokes, rate)
            print(f"  = {live_sets[family]:.2f} sets @ {rate:,.0f} strokes/set")

    if ask_yes_no("Save report to history (JSON)?"):
        payload = {
            "meta": {
                "created_at": datetime.now().isoformat(timespec="seconds"),
                "job_id": job.id,
                "status": job.status.value,
                "next_action": step.action.value if step else None,
            },
            "metrics": view.model_dump(mode="json"),
            "live_sets": live_sets,
        }
        saved = save_report_json(payload)
        print(f"✅ Saved JSON: {saved}\n")

    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
