"""Structured logging configuration with structlog.

Call ``configure_structlog`` once at application start-up, then obtain loggers
with ``structlog.get_logger(__name__)`` and log events by name:

    log = structlog.get_logger(__name__)
    log.info("connection_accepted", connection_id=7, actor_id="...")

Production renders one JSON object per line; development uses the colored
console renderer.
"""

import logging

import structlog

from alumni_hub.core.config import settings


def _get_log_level(level_name: str) -> int:
    return getattr(logging, level_name.upper(), logging.INFO)


def configure_structlog(environment: str = None, level: str = None) -> None:
    """Configure structlog processors for the given environment.

    Args:
        environment: 'production' for JSON output, anything else for console.
            Defaults to ``settings.ENVIRONMENT``.
        level: Log level name. Defaults to ``settings.LOG_LEVEL``.
    """
    environment = environment or settings.ENVIRONMENT
    level = level or settings.LOG_LEVEL

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        # Tracebacks become a string field so each record stays on one line
        final_processors = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        final_processors = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=shared_processors + final_processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
