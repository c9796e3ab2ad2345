"""Structured logging configuration.

All modules log through structlog with ISO timestamps and JSON lines on stderr,
so per-run counters and batch events can be scraped by log tooling.
"""

from __future__ import annotations

import sys
from typing import Any

import structlog

_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a structlog logger bound to a module name.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger emitting JSON events.
    """
    global _CONFIGURED
    if not _CONFIGURED:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
            logger_factory=structlog.PrintLoggerFactory(sys.stderr),
            cache_logger_on_first_use=True,
        )
        _CONFIGURED = True
    return structlog.get_logger(name).bind(logger=name)
