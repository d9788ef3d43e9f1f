"""Structured logging configuration with structlog.

Supports production (JSON) and development (console) output modes.

Log Entry Format (production):
    {
        "timestamp": "2026-01-05T08:00:00.000000Z",
        "level": "info",
        "event": "urgent_batch_dispatched",
        "correlation_id": "uuid",
        ...additional context
    }

Usage:
    from ipdocket.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")  # JSON output
    configure_structlog(environment="development")  # Console output
"""

import logging
import os
from typing import TextIO, cast

import structlog
from structlog.typing import Processor

from ipdocket.infrastructure.observability.correlation import correlation_id_processor

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _get_log_level(override: str | None = None) -> int:
    """Get the configured log level.

    Args:
        override: Level name taking precedence over LOG_LEVEL.

    Returns:
        The logging level integer (e.g., logging.INFO).
    """
    level_name = (override or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_structlog(
    environment: str = "production",
    level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog for the application.

    Should be called once at process startup (API, worker or script).

    Args:
        environment: 'production' for JSON output, anything else for console.
        level: Log level name; defaults to LOG_LEVEL or INFO.
        stream: Output stream; defaults to stdout.
    """
    shared_processors: list[Processor] = [
        # Merge context from contextvars (async support)
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processors: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exceptions itself
        final_processors = [structlog.dev.ConsoleRenderer(colors=stream is None)]

    structlog.configure(
        processors=shared_processors + final_processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )
