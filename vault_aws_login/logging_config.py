"""Structured logging setup for the command-line tool.

Human-friendly console output by default, JSON lines when ``LOG_FORMAT=json``.
Everything is written to stderr so stdout stays reserved for the sign-in URL
and credential fallback output.
"""

import logging
import os
import sys
from typing import Optional

import structlog

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def resolve_log_level(level: Optional[str], verbose: bool = False) -> int:
    """Map a level name to a ``logging`` constant, falling back to INFO."""
    if verbose:
        return logging.DEBUG
    name = (level or "INFO").upper()
    if name not in VALID_LOG_LEVELS:
        return logging.INFO
    return getattr(logging, name)


def configure_logging(level: Optional[str] = None, verbose: bool = False) -> None:
    """Configure stdlib logging and structlog processors.

    Args:
        level: Level name such as "DEBUG" or "WARNING" (default: INFO)
        verbose: Force DEBUG regardless of ``level``
    """
    log_level = resolve_log_level(level, verbose)
    logging.basicConfig(level=log_level, stream=sys.stderr, format="%(message)s", force=True)

    use_json_logs = os.getenv("LOG_FORMAT", "console").lower() == "json"

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if use_json_logs else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
