"""Logging configuration."""

import logging
import sys
from typing import TextIO

import structlog

from refertrack.settings import settings

_RENDERERS = {
    "json": lambda: [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    "console": lambda: [
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.dev.ConsoleRenderer(),
    ],
}


def build_processors(log_format: str) -> list:
    """Processor chain for a log format ("json" or "console")."""
    try:
        renderer = _RENDERERS[log_format]
    except KeyError:
        raise ValueError(f"Unknown log format: {log_format!r}") from None
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        *renderer(),
    ]


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level name (defaults to settings)
        log_format: "json" or "console" (defaults to settings)
        stream: Output stream (defaults to stdout); the CLI passes stderr
            so command output stays parseable
    """
    level = (level or settings.log_level).upper()
    stream = stream or sys.stdout

    structlog.configure(
        processors=build_processors(log_format or settings.log_format),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    # SQLAlchemy and uvicorn log through the standard library
    logging.basicConfig(format="%(message)s", stream=stream, level=level, force=True)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)
