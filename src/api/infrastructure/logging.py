"""Structlog configuration for the application.

Probe events are rendered as colored console lines for development and as
JSON for production. The renderer is picked from ``PLATFORM_LOG_FORMAT``;
``auto`` chooses the console renderer on a TTY or when FORCE_COLOR is set.
"""

import os
import sys
from typing import Literal

import structlog

LogFormat = Literal["auto", "console", "json"]


def use_console_renderer(log_format: LogFormat = "auto") -> bool:
    """Decide whether to render events for humans."""
    if log_format != "auto":
        return log_format == "console"

    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def configure_logging(debug: bool = False, log_format: LogFormat = "auto") -> None:
    """Configure structlog processors and the level filter.

    Args:
        debug: When False, debug-level probe events are filtered out.
        log_format: ``console``, ``json`` or ``auto``.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_console_renderer(log_format):
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    # 10 == logging.DEBUG, 20 == logging.INFO
    min_level = 10 if debug else 20

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
