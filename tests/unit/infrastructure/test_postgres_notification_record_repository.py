"""Unit tests for PostgresNotificationRecordRepository with a mocked session."""

from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)
from ipdocket.infrastructure.adapters.persistence.notification_record_repository import (
    PostgresNotificationRecordRepository,
)

DAY = date(2026, 3, 2)
RECORD = NotificationRecord(
    subject_id="task-1",
    kind=NotificationKind.URGENT_TASK,
    day=DAY,
    sent_at=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc),
)


@pytest.fixture
def session() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def repository(session: AsyncMock) -> PostgresNotificationRecordRepository:
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    return PostgresNotificationRecordRepository(factory)


def _params(session: AsyncMock) -> dict:
    return session.execute.call_args.args[1]


class TestInsertIfAbsent:
    @pytest.mark.asyncio
    async def test_upsert_new_row(self, repository, session) -> None:
        session.execute.return_value = MagicMock(rowcount=1)

        assert await repository.upsert(RECORD) is True

        assert _params(session) == {
            "subject_id": "task-1",
            "kind": "urgent_task",
            "day": DAY,
            "sent_at": RECORD.sent_at,
        }
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_conflict_returns_false(self, repository, session) -> None:
        session.execute.return_value = MagicMock(rowcount=0)

        assert await repository.try_claim(RECORD) is False

    @pytest.mark.asyncio
    async def test_statement_uses_on_conflict(self, repository, session) -> None:
        session.execute.return_value = MagicMock(rowcount=1)

        await repository.try_claim(RECORD)

        assert "ON CONFLICT" in str(session.execute.call_args.args[0])


class TestExists:
    @pytest.mark.asyncio
    async def test_found(self, repository, session) -> None:
        result = MagicMock()
        result.first.return_value = (1,)
        session.execute.return_value = result

        assert await repository.exists("task-1", NotificationKind.URGENT_TASK, DAY)
        assert _params(session)["kind"] == "urgent_task"

    @pytest.mark.asyncio
    async def test_not_found(self, repository, session) -> None:
        result = MagicMock()
        result.first.return_value = None
        session.execute.return_value = result

        assert not await repository.exists("task-1", NotificationKind.URGENT_TASK, DAY)


class TestDeleteAndSchema:
    @pytest.mark.asyncio
    async def test_delete(self, repository, session) -> None:
        await repository.delete("m-1:FIL->GRT", NotificationKind.STATUS_CHANGE, DAY)

        assert _params(session) == {
            "subject_id": "m-1:FIL->GRT",
            "kind": "status_change",
            "day": DAY,
        }
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ensure_schema(self, repository, session) -> None:
        await repository.ensure_schema()

        statement = str(session.execute.call_args.args[0])
        assert "CREATE TABLE IF NOT EXISTS notification_records" in statement
        session.commit.assert_awaited_once()
