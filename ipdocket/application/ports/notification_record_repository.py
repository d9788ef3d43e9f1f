"""Notification record repository port.

Records enforce at-most-one notification per (subject, kind, day).
All writes are keyed by that triple, which makes them idempotent and
removes the need for finer-grained locking.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)


class NotificationRecordRepositoryProtocol(Protocol):
    """Protocol for notification record storage operations.

    Methods:
        exists: Check for a record
        upsert: Idempotent write after a dispatch
        try_claim: Atomic insert-if-absent before a dispatch
        delete: Drop a claim whose dispatch failed
    """

    async def exists(
        self, subject_id: str, kind: NotificationKind, day: date
    ) -> bool:
        """Return True if a record with this key exists."""
        ...

    async def upsert(self, record: NotificationRecord) -> bool:
        """Write a record; an existing record with the same key is kept.

        Returns:
            True if the record was newly written, False if it existed.
        """
        ...

    async def try_claim(self, record: NotificationRecord) -> bool:
        """Atomically write the record only if its key is absent.

        Concurrent callers with the same key: exactly one gets True.
        """
        ...

    async def delete(self, subject_id: str, kind: NotificationKind, day: date) -> None:
        """Remove the record with this key, if any."""
        ...
