"""Structured logging setup.

Outside development every record is rendered as a single JSON line; in
development a human-readable console renderer is used.
"""
from __future__ import annotations

import logging
import sys

import structlog

_configured = False


def configure_logging(environment: str = "development", level: str = "INFO") -> None:
    """Configure stdlib root logging and structlog processors.

    Safe to call more than once; only the first call installs handlers.
    """
    global _configured
    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)
    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if environment == "development":
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True
