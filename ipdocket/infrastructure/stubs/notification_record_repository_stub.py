"""In-memory notification record repository stub.

All operations run under one asyncio lock, which makes try_claim()
atomic for concurrent callers in the same event loop.
"""

from __future__ import annotations

import asyncio
from datetime import date

from ipdocket.application.ports.notification_record_repository import (
    NotificationRecordRepositoryProtocol,
)
from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)

_Key = tuple[str, NotificationKind, date]


class NotificationRecordRepositoryStub(NotificationRecordRepositoryProtocol):
    """In-memory notification record storage.

    Attributes:
        _records: Map of (subject_id, kind, day) to NotificationRecord.
        _lock: Async lock for atomic claims.
    """

    def __init__(self) -> None:
        self._records: dict[_Key, NotificationRecord] = {}
        self._lock = asyncio.Lock()

    async def exists(self, subject_id: str, kind: NotificationKind, day: date) -> bool:
        async with self._lock:
            return (subject_id, kind, day) in self._records

    async def upsert(self, record: NotificationRecord) -> bool:
        async with self._lock:
            return self._insert_if_absent(record)

    async def try_claim(self, record: NotificationRecord) -> bool:
        async with self._lock:
            return self._insert_if_absent(record)

    async def delete(self, subject_id: str, kind: NotificationKind, day: date) -> None:
        async with self._lock:
            self._records.pop((subject_id, kind, day), None)

    def _insert_if_absent(self, record: NotificationRecord) -> bool:
        if record.key in self._records:
            return False
        self._records[record.key] = record
        return True

    # --- Test helpers ---

    def all_records(self) -> list[NotificationRecord]:
        """Get all stored records (for testing)."""
        return list(self._records.values())

    def count(self, kind: NotificationKind | None = None) -> int:
        """Count stored records, optionally of one kind (for testing)."""
        return sum(1 for r in self._records.values() if kind is None or r.kind is kind)
