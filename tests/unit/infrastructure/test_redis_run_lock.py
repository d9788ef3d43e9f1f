"""Unit tests for RedisRunLock against a mocked client."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from ipdocket.infrastructure.adapters.locks.redis_run_lock import (
    KEY_PREFIX,
    RedisRunLock,
)

KEY = "tasks:send-urgent-notifications"


@pytest.fixture
def client() -> AsyncMock:
    client = AsyncMock()
    client.set.return_value = True
    client.eval.return_value = 1
    return client


class TestRedisRunLock:
    @pytest.mark.asyncio
    async def test_acquire_uses_set_nx_px(self, client: AsyncMock) -> None:
        lock = RedisRunLock(client)

        assert await lock.acquire(KEY, 1.5)

        args, kwargs = client.set.call_args
        assert args[0] == f"{KEY_PREFIX}{KEY}"
        assert kwargs == {"nx": True, "px": 1500}

    @pytest.mark.asyncio
    async def test_acquire_fails_when_key_exists(self, client: AsyncMock) -> None:
        client.set.return_value = None
        lock = RedisRunLock(client)

        assert not await lock.acquire(KEY, 60)

        await lock.release(KEY)
        client.eval.assert_not_called()

    @pytest.mark.asyncio
    async def test_release_compares_token(self, client: AsyncMock) -> None:
        lock = RedisRunLock(client)
        await lock.acquire(KEY, 60)
        token = client.set.call_args.args[1]

        await lock.release(KEY)

        args = client.eval.call_args.args
        assert args[1:] == (1, f"{KEY_PREFIX}{KEY}", token)

    @pytest.mark.asyncio
    async def test_release_after_expiry_does_not_raise(self, client: AsyncMock) -> None:
        client.eval.return_value = 0
        lock = RedisRunLock(client)
        await lock.acquire(KEY, 60)

        await lock.release(KEY)

        assert not await lock.is_held(KEY)

    @pytest.mark.asyncio
    async def test_is_held_checks_stored_token(self, client: AsyncMock) -> None:
        lock = RedisRunLock(client)
        await lock.acquire(KEY, 60)
        token = client.set.call_args.args[1]

        client.get.return_value = token.encode()
        assert await lock.is_held(KEY)

        client.get.return_value = b"someone-else"
        assert not await lock.is_held(KEY)

    @pytest.mark.asyncio
    async def test_custom_prefix(self, client: AsyncMock) -> None:
        lock = RedisRunLock(client, key_prefix="test:")

        await lock.acquire(KEY, 60)

        assert client.set.call_args.args[0] == f"test:{KEY}"
