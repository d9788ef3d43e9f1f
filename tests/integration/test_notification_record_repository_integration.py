"""Integration tests for PostgresNotificationRecordRepository."""

import asyncio
from datetime import date, datetime, timezone

import pytest

from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)
from ipdocket.infrastructure.adapters.persistence.notification_record_repository import (
    PostgresNotificationRecordRepository,
)

pytestmark = pytest.mark.integration

DAY = date(2026, 3, 2)


def _record(subject_id: str = "matter-1:FIL->GRT") -> NotificationRecord:
    return NotificationRecord(
        subject_id=subject_id,
        kind=NotificationKind.STATUS_CHANGE,
        day=DAY,
        sent_at=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
async def repository(session_factory) -> PostgresNotificationRecordRepository:
    repo = PostgresNotificationRecordRepository(session_factory)
    await repo.ensure_schema()
    return repo


async def test_upsert_then_exists(repository) -> None:
    assert not await repository.exists("matter-1:FIL->GRT", NotificationKind.STATUS_CHANGE, DAY)

    assert await repository.upsert(_record())
    assert not await repository.upsert(_record())

    assert await repository.exists("matter-1:FIL->GRT", NotificationKind.STATUS_CHANGE, DAY)


async def test_concurrent_claims_single_winner(repository) -> None:
    results = await asyncio.gather(*(repository.try_claim(_record()) for _ in range(8)))

    assert results.count(True) == 1


async def test_delete_releases_claim(repository) -> None:
    await repository.try_claim(_record())

    await repository.delete("matter-1:FIL->GRT", NotificationKind.STATUS_CHANGE, DAY)

    assert await repository.try_claim(_record())


async def test_keys_are_per_kind(repository) -> None:
    await repository.upsert(_record("system"))

    assert not await repository.exists("system", NotificationKind.TASKS_SUMMARY, DAY)
