"""Structured logging through structlog on top of stdlib logging.

Every module logs through ``get_logger(__name__)`` with snake_case event
names and key/value context; ``configure_logging`` picks the renderer.
"""
import logging
import sys
from typing import Any, Optional, TextIO

import structlog

from merchant_feed.config import get_settings


def configure_logging(
    log_level: str = "INFO",
    json_output: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    JSON lines in production, plain console lines elsewhere.

    Args:
        log_level: Standard library level name
        json_output: Force JSON (True) or console (False) rendering.
            Defaults to the environment from settings.
        stream: Output stream (defaults to stdout)
    """
    if json_output is None:
        json_output = get_settings().is_production

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
    )

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger named after the calling module (pass ``__name__``)."""
    return structlog.get_logger(name)
