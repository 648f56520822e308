"""structlog configuration.

Console rendering in development, one JSON object per line when
TASKBOARD_LOG_JSON is set. Request-scoped values (request_id) are bound
through contextvars by RequestIdMiddleware and merged into every entry.
"""

import logging

import structlog

from taskboard.config import settings


def configure_logging() -> None:
    """Configure structlog once for the whole process."""
    level = logging.DEBUG if settings.debug else logging.INFO
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
