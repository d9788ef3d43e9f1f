"""Stub RunLock for development/testing.

Production uses FileRunLock (single node) or RedisRunLock (multi node).
This stub simulates a shared lock across instances with class-level state,
so two job instances in one test contend like two scheduler ticks would.

Configurable Test Modes:
- DEFAULT: Normal exclusive lock semantics
- ACQUIRE_FAILS: acquire() always returns False (another run holds it)
- RELEASE_FAILS: release() raises (tests that failures surface)

Usage Examples:
    # Basic usage
    lock = RunLockStub()

    # Simulate a lock held by a previous run
    lock = RunLockStub.with_acquire_failure()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from ipdocket.application.ports.run_lock import RunLockProtocol


class RunLockMode(Enum):
    """Configurable modes for RunLockStub behavior."""

    DEFAULT = "default"
    ACQUIRE_FAILS = "acquire_fails"
    RELEASE_FAILS = "release_fails"


@dataclass
class RunLockStubConfig:
    """Configuration for RunLockStub behavior.

    Attributes:
        mode: The operating mode for the stub.
    """

    mode: RunLockMode = RunLockMode.DEFAULT


class RunLockStub(RunLockProtocol):
    """Configurable stub implementation of the run-lock.

    Attributes:
        _held: Keys this instance holds.
        _config: Configuration controlling stub behavior.
        _acquire_attempts: Count of acquire() calls.
        _release_count: Count of release() calls.
    """

    # Class-level shared state for simulating an external lock
    _holders: ClassVar[dict[str, RunLockStub]] = {}

    def __init__(self, config: RunLockStubConfig | None = None) -> None:
        self._held: set[str] = set()
        self._config = config or RunLockStubConfig()
        self._acquire_attempts = 0
        self._release_count = 0
        self.last_ttl_seconds: float | None = None

    @classmethod
    def with_acquire_failure(cls) -> RunLockStub:
        """Create stub that always fails to acquire the lock."""
        return cls(RunLockStubConfig(mode=RunLockMode.ACQUIRE_FAILS))

    @classmethod
    def with_release_failure(cls) -> RunLockStub:
        """Create stub whose release() raises RuntimeError."""
        return cls(RunLockStubConfig(mode=RunLockMode.RELEASE_FAILS))

    @classmethod
    def reset_global_state(cls) -> None:
        """Reset class-level shared state. Call between tests."""
        cls._holders = {}

    # --- Protocol implementation ---

    async def acquire(self, key: str, ttl_seconds: float) -> bool:
        self._acquire_attempts += 1
        self.last_ttl_seconds = ttl_seconds

        if self._config.mode == RunLockMode.ACQUIRE_FAILS:
            return False

        holder = RunLockStub._holders.get(key)
        if holder is not None:
            return False

        self._held.add(key)
        RunLockStub._holders[key] = self
        return True

    async def release(self, key: str) -> None:
        self._release_count += 1
        if self._config.mode == RunLockMode.RELEASE_FAILS:
            raise RuntimeError(f"release of {key} failed")
        self._held.discard(key)
        if RunLockStub._holders.get(key) is self:
            del RunLockStub._holders[key]

    async def is_held(self, key: str) -> bool:
        return key in self._held

    # --- Test helpers ---

    def get_acquire_attempts(self) -> int:
        """Number of acquire() calls made."""
        return self._acquire_attempts

    def get_release_count(self) -> int:
        """Number of release() calls made."""
        return self._release_count
