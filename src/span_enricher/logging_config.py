"""
Structured logging configuration using structlog.

Worker threads log through the same processors; the batch orchestrator binds
``batch_index`` on its per-batch loggers so interleaved output stays traceable.
"""

import logging
from typing import Optional

import structlog

from .config import settings


def setup_logging(log_level: Optional[str] = None, log_json: Optional[bool] = None) -> None:
    """
    Configure structlog for span enrichment.

    Args:
        log_level: Overrides ``settings.log_level`` (CLI ``--log-level``)
        log_json: Overrides ``settings.log_json``; console rendering when False
    """
    level = (log_level or settings.log_level).upper()
    render_json = settings.log_json if log_json is None else log_json

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if render_json
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
