"""Unit tests for RenewalCancellationService."""

from __future__ import annotations

from datetime import timedelta

import pytest

from ipdocket.application.services.renewal_cancellation_service import (
    AUTO_CANCEL_NOTE_TEMPLATE,
    RenewalCancellationService,
)
from ipdocket.domain.events.matter_status import MatterStatusChangedEvent
from ipdocket.domain.models.matter import MatterStatus
from ipdocket.infrastructure.stubs import TaskRepositoryStub
from tests.helpers import FakeTimeAuthority, make_task


@pytest.fixture
def time_authority() -> FakeTimeAuthority:
    return FakeTimeAuthority()


@pytest.fixture
def tasks() -> TaskRepositoryStub:
    return TaskRepositoryStub(
        [
            make_task("ren-1", "matter-1", code="REN", due_in=timedelta(days=60)),
            make_task("ren-2", "matter-1", code="REN", due_in=timedelta(days=425)),
            make_task("pri-1", "matter-1", code="PRI"),
            make_task("ren-other", "matter-2", code="REN"),
            make_task("ren-done", "matter-1", code="REN", done=True),
        ]
    )


@pytest.fixture
def service(tasks, time_authority) -> RenewalCancellationService:
    return RenewalCancellationService(tasks, time_authority)


def _event(time_authority, new_status, old_status=MatterStatus.GRANTED):
    return MatterStatusChangedEvent(
        matter_id="matter-1",
        old_status=old_status,
        new_status=new_status,
        occurred_at=time_authority.now(),
        changed_by="actor-1",
    )


class TestCancellingStatuses:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [
            MatterStatus.REFUSED,
            MatterStatus.ABANDONED,
            MatterStatus.EXPIRED,
            MatterStatus.WITHDRAWN,
        ],
    )
    async def test_open_renewals_completed(
        self, service, tasks, time_authority, status
    ) -> None:
        cancelled = await service.on_status_changed(_event(time_authority, status))

        assert cancelled == 2
        for task_id in ("ren-1", "ren-2"):
            task = await tasks.get(task_id)
            assert task.done
            assert task.done_date == time_authority.now()
            assert task.notes == AUTO_CANCEL_NOTE_TEMPLATE.format(status=status.value)

    @pytest.mark.asyncio
    async def test_other_tasks_untouched(self, service, tasks, time_authority) -> None:
        await service.on_status_changed(_event(time_authority, MatterStatus.ABANDONED))

        assert not (await tasks.get("pri-1")).done
        assert not (await tasks.get("ren-other")).done

    @pytest.mark.asyncio
    async def test_note_text(self, service, tasks, time_authority) -> None:
        await service.on_status_changed(_event(time_authority, MatterStatus.ABANDONED))

        task = await tasks.get("ren-1")
        assert task.notes == "Auto-cancelled due to matter status: Abandoned"

    @pytest.mark.asyncio
    async def test_second_call_is_noop(self, service, time_authority) -> None:
        event = _event(time_authority, MatterStatus.EXPIRED)
        await service.on_status_changed(event)

        assert await service.on_status_changed(event) == 0

    @pytest.mark.asyncio
    async def test_cancelled_renewals_leave_urgent_scan(
        self, service, tasks, time_authority
    ) -> None:
        await service.on_status_changed(_event(time_authority, MatterStatus.REFUSED))

        cutoff = time_authority.now() + timedelta(days=500)
        open_ids = {t.task_id for t in await tasks.list_open_tasks_due_before(cutoff)}
        assert "ren-1" not in open_ids
        assert "ren-2" not in open_ids


class TestNonCancellingStatuses:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [MatterStatus.GRANTED, MatterStatus.DEAD, MatterStatus.PUBLISHED],
    )
    async def test_nothing_cancelled(self, service, tasks, time_authority, status) -> None:
        cancelled = await service.on_status_changed(
            _event(time_authority, status, old_status=MatterStatus.FILED)
        )

        assert cancelled == 0
        assert not (await tasks.get("ren-1")).done

    @pytest.mark.asyncio
    async def test_no_transition(self, service, tasks, time_authority) -> None:
        event = _event(
            time_authority, MatterStatus.ABANDONED, old_status=MatterStatus.ABANDONED
        )

        assert await service.on_status_changed(event) == 0
        assert not (await tasks.get("ren-1")).done


class TestErrors:
    @pytest.mark.asyncio
    async def test_repository_error_propagates(self, service, tasks, time_authority) -> None:
        tasks.set_failure(ConnectionError("db down"))

        with pytest.raises(ConnectionError):
            await service.on_status_changed(_event(time_authority, MatterStatus.REFUSED))
