"""structlog setup."""

import logging

import structlog

from .config import Settings


def configure_logging(settings: Settings) -> None:
    """Apply level filtering and rendering from settings.

    Module loggers are created with ``structlog.get_logger`` at import time;
    they pick up this configuration on first use.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.LOG_JSON:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
