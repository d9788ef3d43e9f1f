"""File-based run-lock (single node).

One lock file per key. The content is written to a temporary file first and
published with os.link, which fails if the lock file exists, so a lock file
is never visible half written. It holds the owner token and an expiry:

    {"owner": "<uuid>", "expires_at": 1767254400.0, "pid": 4242}

A lock file whose expiry has passed belongs to a crashed run and is taken
over: it is renamed aside and checked by inode before a new one is linked,
so two runs racing for the same stale file cannot both win. A file that
cannot be parsed counts as held until its mtime is older than the TTL.
Lock files survive process restarts.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any
from uuid import uuid4

from structlog import get_logger

from ipdocket.application.ports.run_lock import RunLockProtocol

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileRunLock(RunLockProtocol):
    """Run-lock backed by exclusive lock files in ``lock_dir``."""

    def __init__(
        self, lock_dir: str | Path, clock: Callable[[], float] = time.time
    ) -> None:
        """Initialize the lock.

        Args:
            lock_dir: Directory for lock files (created if missing).
            clock: Wall clock in epoch seconds; replaceable in tests.
        """
        self._dir = Path(lock_dir)
        self._clock = clock
        self._owner = str(uuid4())
        self._held: set[str] = set()

    def path_for(self, key: str) -> Path:
        """Lock file path of a key (job names contain ':')."""
        return self._dir / f"{_UNSAFE_CHARS.sub('_', key)}.lock"

    async def acquire(self, key: str, ttl_seconds: float) -> bool:
        return await asyncio.to_thread(self._acquire, key, ttl_seconds)

    async def release(self, key: str) -> None:
        await asyncio.to_thread(self._release, key)

    async def is_held(self, key: str) -> bool:
        return key in self._held and self._read_owner(self.path_for(key)) == self._owner

    def _acquire(self, key: str, ttl_seconds: float) -> bool:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        if self._claim(key, path, ttl_seconds):
            return True

        try:
            seen = path.stat()
        except FileNotFoundError:
            # Released between our attempt and the stat.
            return self._claim(key, path, ttl_seconds)
        state = self._read_state(path)
        if not self._is_stale(state, seen.st_mtime, ttl_seconds):
            return False

        logger.warning(
            "stale_run_lock_taken_over",
            lock_key=key,
            previous_owner=(state or {}).get("owner"),
        )
        if not self._retire(path, seen.st_ino):
            return False
        return self._claim(key, path, ttl_seconds)

    def _claim(self, key: str, path: Path, ttl_seconds: float) -> bool:
        """Publish a complete lock file; fails if one already exists."""
        content = {
            "owner": self._owner,
            "expires_at": self._clock() + ttl_seconds,
            "pid": os.getpid(),
        }
        tmp = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
        tmp.write_text(json.dumps(content), encoding="utf-8")
        try:
            os.link(tmp, path)
        except FileExistsError:
            return False
        finally:
            tmp.unlink(missing_ok=True)
        self._held.add(key)
        return True

    def _is_stale(
        self, state: dict[str, Any] | None, mtime: float, ttl_seconds: float
    ) -> bool:
        expires_at = state.get("expires_at") if state else None
        if isinstance(expires_at, (int, float)):
            return expires_at <= self._clock()
        # Unreadable: judge by age, the writer may not have finished yet.
        return self._clock() - mtime >= ttl_seconds

    def _retire(self, path: Path, inode: int) -> bool:
        """Move the stale lock file at ``path`` aside.

        Returns False when the file found there is no longer the one judged
        stale; that file is put back.
        """
        retired = path.with_name(f"{path.name}.stale-{uuid4().hex}")
        try:
            os.rename(path, retired)
        except FileNotFoundError:
            # Another run retired it first; the link in _claim decides.
            return True
        try:
            if retired.stat().st_ino == inode:
                return True
            try:
                os.link(retired, path)
            except FileExistsError:
                logger.error("run_lock_restore_failed", lock_path=str(path))
            return False
        finally:
            retired.unlink(missing_ok=True)

    def _release(self, key: str) -> None:
        path = self.path_for(key)
        self._held.discard(key)
        if self._read_owner(path) != self._owner:
            # Expired and taken over by another run; not ours to delete.
            return
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    def _read_owner(self, path: Path) -> str | None:
        state = self._read_state(path)
        return state.get("owner") if state else None

    @staticmethod
    def _read_state(path: Path) -> dict[str, Any] | None:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            return {}
