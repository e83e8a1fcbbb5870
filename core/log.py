from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Console logging with ISO timestamps, filtered at `level`."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )
