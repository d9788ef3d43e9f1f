"""Async SQLAlchemy engine for the notification record store.

Environment Variables:
- DATABASE_URL: PostgreSQL URL; plain ``postgres://`` / ``postgresql://``
  schemes are rewritten to the asyncpg driver.
- SQLALCHEMY_ECHO: "1", "true" or "yes" logs every statement.
"""

from __future__ import annotations

import os
from urllib.parse import urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from structlog import get_logger

logger = get_logger()

ASYNC_SCHEME = "postgresql+asyncpg"
_PLAIN_SCHEMES = ("postgres", "postgresql")

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """DATABASE_URL with the asyncpg driver scheme.

    Raises:
        ValueError: If DATABASE_URL is not set.
    """
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL is not set; notification records need PostgreSQL")

    scheme, sep, rest = url.partition("://")
    if not sep:
        return f"{ASYNC_SCHEME}://{url}"
    if scheme in _PLAIN_SCHEMES:
        return f"{ASYNC_SCHEME}://{rest}"
    return url


def mask_database_url(url: str) -> str:
    """Replace the password of ``url`` with ``***``."""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    host = parts.hostname or ""
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return urlunsplit(parts._replace(netloc=f"{parts.username}:***@{host}"))


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to a lazily created engine."""
    global _engine, _session_factory
    if _session_factory is None:
        url = get_database_url()
        _engine = create_async_engine(
            url,
            echo=os.environ.get("SQLALCHEMY_ECHO", "").lower() in ("1", "true", "yes"),
            pool_pre_ping=True,
        )
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
        logger.info("record_store_engine_created", url=mask_database_url(url))
    return _session_factory


async def close_database_engine() -> None:
    """Dispose the engine; the next get_session_factory() builds a new one."""
    engine = _engine
    reset_database_bootstrap()
    if engine is not None:
        await engine.dispose()


def reset_database_bootstrap() -> None:
    """Forget the engine without disposing it (tests)."""
    global _engine, _session_factory
    _engine = None
    _session_factory = None
