"""Observability infrastructure for structured logging and correlation.

This module provides cross-cutting observability concerns:
- Structured JSON logging with structlog
- Correlation ID management (job run IDs, request IDs)

Usage:
    from ipdocket.infrastructure.observability import (
        configure_structlog,
        set_correlation_id,
    )

    # At startup
    configure_structlog(environment="production")

    # Per request or job run
    set_correlation_id(run_id)
"""

from ipdocket.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from ipdocket.infrastructure.observability.logging import configure_structlog

__all__: list[str] = [
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]
