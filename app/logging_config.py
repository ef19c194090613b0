"""
Structured logging configuration using structlog.

All logs are output as JSON with consistent context fields.
"""

import logging
import sys

import structlog

from app.config import settings


def configure_logging(level: str = settings.LOG_LEVEL):
    """Configure structlog for JSON output with context."""
    log_level = logging.getLevelName(level.upper())
    invalid_level = not isinstance(log_level, int)
    if invalid_level:
        log_level = logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    configured = structlog.get_logger()
    if invalid_level:
        configured.warning("invalid_log_level", value=level, using="INFO")
    return configured


logger = configure_logging()


def get_logger(**context):
    """
    Get a logger with additional context bound.

    Usage:
        log = get_logger(form_id=form_id)
        log.info("form_submitted", mode="sign_up")
    """
    return logger.bind(**context)
