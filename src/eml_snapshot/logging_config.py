"""
Structured logging configuration using structlog.

This module sets up structlog for JSON-based structured logging with context binding.
"""

import logging
from typing import Optional

import structlog

from .config import settings


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structlog for structured JSON logging.

    Sets up processors for:
    - Context variable merging
    - Log level addition
    - Exception info rendering
    - Timestamp addition
    - JSON or console rendering based on settings

    Args:
        level: Log level override (defaults to settings.log_level)
        json_output: Renderer override (defaults to settings.log_json)
    """
    level = level or settings.log_level
    json_output = settings.log_json if json_output is None else json_output

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if json_output
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
