"""structlog configuration for formbridge.

Hosts call ``configure_logging()`` once at startup. Library modules only do
``structlog.get_logger()`` and never configure output themselves.
"""

import logging
from typing import Optional

import structlog

from formbridge.config import Settings, get_settings

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def resolve_log_level(name: str) -> int:
    """Map a level name from settings to a ``logging`` level (unknown → INFO)."""
    return _LEVELS.get(name.strip().lower(), logging.INFO)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog processors and the level filter.

    Args:
        settings: Settings to read DEBUG / LOG_LEVEL from. Defaults to get_settings().
    """
    settings = settings or get_settings()

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(settings.LOG_LEVEL)),
        cache_logger_on_first_use=False,
    )
