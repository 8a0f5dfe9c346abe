"""
Bloom Tree - Logging Configuration

The library itself only emits events through structlog; applications
embedding it call setup_logging() once at startup.
"""

import logging
import sys

import structlog

from bloomtree.core.config import settings


def setup_logging(json_logs: bool | None = None, level: str | None = None) -> None:
    """
    Configure structured logging.

    Args:
        json_logs: Render JSON lines instead of console output.
            Defaults to True when ENV is "production".
        level: Stdlib log level name, defaults to settings.LOG_LEVEL
    """
    if json_logs is None:
        json_logs = settings.ENV == "production"
    level_name = (level or settings.LOG_LEVEL).upper()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name),
    )
