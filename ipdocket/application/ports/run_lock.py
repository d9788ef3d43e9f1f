"""Run-lock port - prevents overlapping runs of a scheduled job.

The scheduler itself cannot guarantee single-node execution, so every
scheduled job acquires an exclusive lock keyed by its name before doing
any work. The lock is an external resource (file, Redis key) rather than
an in-memory flag so it stays meaningful across process restarts and
nodes.

Production Implementations:
- FileRunLock: O_EXCL lock file with owner token and expiry (single node)
- RedisRunLock: SET NX PX with owner token (multi node)

A TTL bounds how long a crashed run can block later ticks.
"""

from abc import ABC, abstractmethod


class RunLockProtocol(ABC):
    """Abstract interface for job run-locks.

    For development/testing, use RunLockStub.
    """

    @abstractmethod
    async def acquire(self, key: str, ttl_seconds: float) -> bool:
        """Try to acquire the lock without waiting.

        Args:
            key: Lock key (the job name).
            ttl_seconds: Lifetime after which a stale lock may be taken over.

        Returns:
            True if acquired, False if another run holds it.

        Note:
            Never blocks and never retries. A held lock means the caller
            must skip this run.
        """
        ...

    @abstractmethod
    async def release(self, key: str) -> None:
        """Release the lock if this instance holds it.

        Releasing a lock that is not held by this instance is a no-op.
        """
        ...

    @abstractmethod
    async def is_held(self, key: str) -> bool:
        """Check whether this instance currently holds the lock."""
        ...
