"""
Integration test configuration with testcontainers.

Session-scoped containers:
- PostgreSQL 16 (notification records)
- Redis 7 (run-lock)

Containers are started once per test session; state is reset between
tests by function-scoped fixtures.

Usage:
    @pytest.mark.integration
    async def test_example(session_factory, redis_client) -> None:
        ...

Note: Docker must be running. Integration tests are deselected by default;
run them with ``pytest -m integration``.
"""

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
import redis.asyncio as aioredis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer
from testcontainers.redis import RedisContainer


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container."""
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def redis_container() -> Generator[RedisContainer, None, None]:
    """Session-scoped Redis 7 container."""
    with RedisContainer("redis:7-alpine") as redis_cont:
        yield redis_cont


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Async (asyncpg) connection URL of the container.

    testcontainers returns a psycopg2 URL by default.
    """
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory; the records table is dropped afterwards."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    yield factory

    async with factory() as session:
        await session.execute(text("DROP TABLE IF EXISTS notification_records"))
        await session.commit()
    await engine.dispose()


@pytest.fixture
async def redis_client(
    redis_container: RedisContainer,
) -> AsyncGenerator[aioredis.Redis, None]:  # type: ignore[type-arg]
    """Per-test Redis client with FLUSHDB isolation."""
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)

    client: aioredis.Redis[Any] = aioredis.Redis(host=host, port=int(port))

    yield client

    await client.flushdb()
    await client.aclose()
