"""Scoped run-lock acquisition.

The run-lock is the only shared mutable resource of the notification job.
It is taken through ``hold_run_lock`` so the release runs in ``finally``
on every exit path: success, partial failure, fatal failure, cancellation.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from ipdocket.application.ports.run_lock import RunLockProtocol
from ipdocket.domain.errors.run_lock import RunLockHeldError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def hold_run_lock(
    lock: RunLockProtocol,
    key: str,
    ttl_seconds: float,
) -> AsyncIterator[None]:
    """Hold ``key`` for the duration of the block.

    Args:
        lock: Run-lock implementation.
        key: Lock key (job name).
        ttl_seconds: Lock lifetime.

    Raises:
        RunLockHeldError: If the lock is held elsewhere. The block does
            not run and nothing is released.
    """
    if not await lock.acquire(key, ttl_seconds):
        raise RunLockHeldError(key)
    logger.debug("run_lock_acquired", lock_key=key, ttl_seconds=ttl_seconds)
    try:
        yield
    finally:
        await lock.release(key)
        logger.debug("run_lock_released", lock_key=key)
