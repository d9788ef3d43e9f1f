"""PostgreSQL notification record repository (SQLAlchemy async).

Records live in one table keyed by (subject_id, kind, day); see
CREATE_TABLE_SQL, applied by ensure_schema().

The primary key makes ``INSERT ... ON CONFLICT DO NOTHING`` both the
idempotent upsert and the atomic claim: exactly one concurrent writer of
a key sees a row inserted.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ipdocket.application.ports.notification_record_repository import (
    NotificationRecordRepositoryProtocol,
)
from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS notification_records (
    subject_id TEXT NOT NULL,
    kind       TEXT NOT NULL,
    day        DATE NOT NULL,
    sent_at    TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (subject_id, kind, day)
)
"""

_INSERT_IF_ABSENT = text(
    """
    INSERT INTO notification_records (subject_id, kind, day, sent_at)
    VALUES (:subject_id, :kind, :day, :sent_at)
    ON CONFLICT (subject_id, kind, day) DO NOTHING
    """
)

_EXISTS = text(
    """
    SELECT 1 FROM notification_records
    WHERE subject_id = :subject_id AND kind = :kind AND day = :day
    """
)

_DELETE = text(
    """
    DELETE FROM notification_records
    WHERE subject_id = :subject_id AND kind = :kind AND day = :day
    """
)


class PostgresNotificationRecordRepository(NotificationRecordRepositoryProtocol):
    """Notification records in PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def ensure_schema(self) -> None:
        """Create the records table if it does not exist."""
        async with self._session_factory() as session:
            await session.execute(text(CREATE_TABLE_SQL))
            await session.commit()

    async def exists(self, subject_id: str, kind: NotificationKind, day: date) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                _EXISTS, {"subject_id": subject_id, "kind": kind.value, "day": day}
            )
            return result.first() is not None

    async def upsert(self, record: NotificationRecord) -> bool:
        return await self._insert_if_absent(record)

    async def try_claim(self, record: NotificationRecord) -> bool:
        return await self._insert_if_absent(record)

    async def delete(self, subject_id: str, kind: NotificationKind, day: date) -> None:
        async with self._session_factory() as session:
            await session.execute(
                _DELETE, {"subject_id": subject_id, "kind": kind.value, "day": day}
            )
            await session.commit()

    async def _insert_if_absent(self, record: NotificationRecord) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                _INSERT_IF_ABSENT,
                {
                    "subject_id": record.subject_id,
                    "kind": record.kind.value,
                    "day": record.day,
                    "sent_at": record.sent_at,
                },
            )
            await session.commit()
            return (result.rowcount or 0) > 0
