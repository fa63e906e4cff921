from __future__ import annotations

import logging
from typing import Optional

import structlog

from config import get_config


def configure_logging(level: Optional[str] = None) -> None:
    """
    Human-readable console output, filtered at ``level``.

    Library modules only fetch loggers; applications call this once at start-up.
    ``level`` defaults to ``LibConfig.log_level``.
    """
    level = (level or get_config().log_level).upper()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    return structlog.get_logger(name)
