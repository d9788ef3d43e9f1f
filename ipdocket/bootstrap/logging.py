"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from ipdocket.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_ENV = "IPDOCKET_ENV"


def configure_structlog(environment: str | None = None, level: str | None = None) -> None:
    """Configure structlog for the given environment.

    Args:
        environment: 'production' or 'development'; defaults to IPDOCKET_ENV,
            then 'production'.
        level: Log level override.
    """
    _configure_structlog(
        environment=environment or os.environ.get(ENVIRONMENT_ENV, "production"),
        level=level,
    )


__all__ = ["configure_structlog"]
