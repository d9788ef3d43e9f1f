"""Redis run-lock (multi node).

acquire: SET key token NX PX ttl. release: compare-and-delete in Lua so a
run whose lock expired never deletes the lock of the run that took over.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from structlog import get_logger

from ipdocket.application.ports.run_lock import RunLockProtocol

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

KEY_PREFIX = "ipdocket:run-lock:"

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisRunLock(RunLockProtocol):
    """Run-lock backed by a Redis key with an owner token."""

    def __init__(self, client: Redis[Any], key_prefix: str = KEY_PREFIX) -> None:
        self._client = client
        self._prefix = key_prefix
        self._tokens: dict[str, str] = {}

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def acquire(self, key: str, ttl_seconds: float) -> bool:
        token = str(uuid4())
        acquired = await self._client.set(
            self._redis_key(key),
            token,
            nx=True,
            px=max(1, int(ttl_seconds * 1000)),
        )
        if not acquired:
            return False
        self._tokens[key] = token
        return True

    async def release(self, key: str) -> None:
        token = self._tokens.pop(key, None)
        if token is None:
            return
        deleted = await self._client.eval(_RELEASE_SCRIPT, 1, self._redis_key(key), token)
        if not deleted:
            logger.warning("run_lock_expired_before_release", lock_key=key)

    async def is_held(self, key: str) -> bool:
        token = self._tokens.get(key)
        if token is None:
            return False
        current = await self._client.get(self._redis_key(key))
        if isinstance(current, bytes):
            current = current.decode()
        return current == token
