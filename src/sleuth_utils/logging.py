"""Structured logging with structlog.

In production:
- JSON lines, one event per line
- Suitable for log aggregation of batch training runs

In development (localhost):
- Uses structlog's colorized console output
- Easier to read while tuning heuristics

Both write to stderr so the offline tools keep stdout for their results.
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors common to every environment."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


@lru_cache(maxsize=1)
def _configure_logging(*, is_production: bool, level: str) -> None:
    """Configure structlog for the application.

    Args:
        is_production: Use JSON output for production, colorized for dev.
        level: Minimum level name, or "silent" to suppress everything below CRITICAL.
    """
    min_level = logging.CRITICAL if level == "silent" else getattr(logging, level)

    if is_production:
        processors = [
            *_shared_processors(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *_shared_processors(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a logger for a specific module/service.

    Args:
        name: Logger name (typically module name like "slopsleuth.profiles.cache").

    Returns:
        Configured structlog logger with service context.

    Example:
        >>> log = get_logger("slopsleuth.profiles.cache")
        >>> log.info("profile_fetched", identity="someone", status=200)
    """
    # Lazy configuration on first logger access
    from sleuth_utils.settings import get_settings

    settings = get_settings()
    _configure_logging(is_production=settings.is_production, level=settings.log_level)

    return structlog.get_logger(service=name)
