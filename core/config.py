# core/config.py
# Settings are read from data/settings.json (or FOAM_SETTINGS_PATH).

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

DEFAULT_STROKES_PER_SET = 6600.0

SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "settings.json"


class Yields(BaseModel):
    """Default strokes per set, used when a job has no override of its own."""

    open_cell_strokes: float = Field(default=DEFAULT_STROKES_PER_SET, gt=0)
    closed_cell_strokes: float = Field(default=DEFAULT_STROKES_PER_SET, gt=0)


class Costs(BaseModel):
    open_cell: float = Field(default=0, ge=0)  # $/set
    closed_cell: float = Field(default=0, ge=0)  # $/set
    labor_rate: float = Field(default=0, ge=0)  # $/hour


class Settings(BaseModel):
    yields: Yields = Yields()
    costs: Costs = Costs()

    log_level: str = "INFO"

    api_host: str = "127.0.0.1"
    api_port: int = 8000


def settings_path() -> Path:
    override = os.getenv("FOAM_SETTINGS_PATH")
    return Path(override) if override else SETTINGS_PATH


def load_settings(path: Path | None = None) -> Settings:
    """Read settings JSON. A missing file gives the built-in defaults."""
    path = path or settings_path()

    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            settings = Settings.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid settings file: {e}", path=str(path)) from e
    else:
        settings = Settings()

    level = os.getenv("LOG_LEVEL")
    if level:
        settings = settings.model_copy(update={"log_level": level.upper()})
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
