"""Run-lock adapters."""

from ipdocket.infrastructure.adapters.locks.file_run_lock import FileRunLock
from ipdocket.infrastructure.adapters.locks.redis_run_lock import RedisRunLock

__all__ = ["FileRunLock", "RedisRunLock"]
