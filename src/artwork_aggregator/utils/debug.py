"""Logging setup for the artwork aggregator.

All modules log through structlog with key/value events. Debug output is
toggled via the ARTWORK_DEBUG environment variable.

Usage:
    from artwork_aggregator.utils.debug import configure_logging

    configure_logging()            # honour ARTWORK_DEBUG
    configure_logging(debug=True)  # force debug output

Environment:
    ARTWORK_DEBUG: Set to '1', 'true', 'yes' (case-insensitive) to enable
                   debug output. Any other value or unset keeps INFO.
"""

import logging
import os
import sys

import structlog


def is_debug_enabled() -> bool:
    """Return True if ARTWORK_DEBUG asks for debug output."""
    return os.environ.get("ARTWORK_DEBUG", "").lower() in ("1", "true", "yes")


def configure_logging(debug: bool | None = None) -> None:
    """Configure structlog to render to stderr.

    Args:
        debug: Force debug on/off; None reads ARTWORK_DEBUG
    """
    enabled = is_debug_enabled() if debug is None else debug
    level = logging.DEBUG if enabled else logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
