"""
STOCKNOTE - Structured Logging Utility
Uses structlog for production-grade structured logging.
"""
import logging
import sys
from typing import Optional

import structlog

from stocknote.config.settings import AppSettings


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """Configure structured logging for the entire application."""
    settings = settings or AppSettings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also configure standard library logging (uvicorn, sqlalchemy)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name or "stocknote")
