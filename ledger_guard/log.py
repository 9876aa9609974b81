"""
Structured Logging

DESIGN DECISION: Every state change in the ledger is logged as a
structured event (snake_case event name + keyword context).
The transaction log itself is the only persisted history; these logs
are for local debugging only and are never written to storage.

configure_logging() is called once by the entry point. Library modules
only call get_logger().
"""

import logging
import sys
from typing import Optional

import structlog

from ledger_guard.config import get_settings


_CONFIGURED = False


def configure_logging(
    level: Optional[str] = None,
    debug: Optional[bool] = None,
) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Args:
        level: Minimum log level name. Defaults to the configured log_level.
        debug: Render human-readable console output instead of JSON.
               Defaults to the configured debug_mode.
    """
    global _CONFIGURED

    app_settings = get_settings().app
    level = (level or app_settings.log_level).upper()
    debug = app_settings.debug_mode if debug is None else debug

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
    )
    logging.getLogger("ledger_guard").setLevel(getattr(logging, level, logging.INFO))

    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer()
    )

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring defaults on first use."""
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
