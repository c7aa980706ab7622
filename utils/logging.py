# utils/logging.py

"""Logging helpers for the Lexicon Nexus client.

Log calls go through structlog and end up in stdlib logging, so one set of
handlers serves both. Context bound with ``structlog.contextvars`` (the CLI
binds the current topic) is merged into every event.
"""

from __future__ import annotations

import logging
import logging.handlers
import os

import structlog
from rich.logging import RichHandler

from config import settings

logger = structlog.get_logger(__name__)


__all__ = ["setup_logging"]


def _plain_formatter() -> logging.Formatter:
    return logging.Formatter(settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)


def _rotating_file_handler(log_file: str) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=settings.LOG_FILE_MAX_BYTES,
        backupCount=settings.LOG_FILE_BACKUPS,
        mode="a",
        encoding="utf-8",
    )
    handler.setFormatter(_plain_formatter())
    return handler


def _console_handler() -> logging.Handler:
    if not settings.ENABLE_RICH_PROGRESS:
        handler = logging.StreamHandler()
        handler.setFormatter(_plain_formatter())
        return handler
    # Markup stays off: generated topics may contain square brackets.
    return RichHandler(
        level=settings.LOG_LEVEL_STR,
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )


def setup_logging() -> None:
    """Configure structlog and standard logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.LOG_LEVEL_STR)

    if settings.LOG_FILE:
        try:
            root_logger.addHandler(_rotating_file_handler(settings.LOG_FILE))
        except OSError as e:
            logger.error("Error setting up file logger: %s", e)

    root_logger.addHandler(_console_handler())

    for noisy in settings.QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.get_logger().info(
        "Logging setup complete.",
        log_level=logging.getLevelName(settings.LOG_LEVEL_STR),
        log_file=settings.LOG_FILE,
    )
