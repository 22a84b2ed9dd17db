from __future__ import annotations

import logging

import structlog


def resolve_level(level: str | int | None) -> int:
    """'debug', 'DEBUG' or 10 -> 10; anything unknown means INFO."""

    if isinstance(level, int):
        return level
    number = logging.getLevelName(str(level or "INFO").strip().upper())
    return number if isinstance(number, int) else logging.INFO


def configure_logging(level: str | int | None = "INFO", *, json: bool = True) -> None:
    """Route structlog events through one processor chain.

    Production renders one JSON object per event; ``json=False`` gives the
    console renderer for local development.
    """

    numeric_level = resolve_level(level)
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
    logging.basicConfig(level=numeric_level, format="%(message)s")


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
