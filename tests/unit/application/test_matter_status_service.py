"""Unit tests for MatterStatusService (the status write path)."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from ipdocket.application.dtos.notification import StatusNotificationAction
from ipdocket.application.services.matter_status_service import MatterStatusService
from ipdocket.application.services.renewal_cancellation_service import (
    RenewalCancellationService,
)
from ipdocket.application.services.status_transition_notifier import (
    StatusTransitionNotifier,
)
from ipdocket.domain.errors.matter import MatterNotFoundError
from ipdocket.domain.models.matter import MatterStatus
from ipdocket.infrastructure.stubs import (
    ActorRepositoryStub,
    MatterRepositoryStub,
    NotificationRecordRepositoryStub,
    RecordingNotificationSinkStub,
    TaskRepositoryStub,
)
from tests.helpers import FakeTimeAuthority, make_actor, make_matter, make_task


class _Wiring:
    def __init__(self) -> None:
        self.time = FakeTimeAuthority()
        self.matters = MatterRepositoryStub([make_matter("matter-1")])
        self.tasks = TaskRepositoryStub(
            [make_task("ren-1", "matter-1", code="REN", due_in=timedelta(days=90))]
        )
        self.actors = ActorRepositoryStub(
            [make_actor("client-1"), make_actor("actor-1")]
        )
        self.records = NotificationRecordRepositoryStub()
        self.sink = RecordingNotificationSinkStub()
        self.notifier = StatusTransitionNotifier(
            self.actors, self.records, self.sink, self.time
        )
        self.renewals = RenewalCancellationService(self.tasks, self.time)
        self.service = MatterStatusService(
            matter_repo=self.matters,
            notifier=self.notifier,
            renewal_cancellation=self.renewals,
            time_authority=self.time,
        )


@pytest.fixture
def wiring() -> _Wiring:
    return _Wiring()


class TestChangeStatus:
    @pytest.mark.asyncio
    async def test_status_saved_with_attribution(self, wiring: _Wiring) -> None:
        outcome = await wiring.service.change_status("matter-1", "Granted", "actor-1")

        saved = await wiring.matters.get("matter-1")
        assert saved.status is MatterStatus.GRANTED
        assert saved.status_changed_by == "actor-1"
        assert saved.status_changed_at == wiring.time.now()
        assert outcome.matter == saved

    @pytest.mark.asyncio
    async def test_event_describes_transition(self, wiring: _Wiring) -> None:
        outcome = await wiring.service.change_status("matter-1", "GRT", "actor-1")

        assert outcome.event.old_status is MatterStatus.FILED
        assert outcome.event.new_status is MatterStatus.GRANTED
        assert outcome.event.changed_by == "actor-1"
        assert outcome.event.occurred_at == wiring.time.now()

    @pytest.mark.asyncio
    async def test_granted_notifies_client(self, wiring: _Wiring) -> None:
        outcome = await wiring.service.change_status("matter-1", "Granted", "actor-1")

        assert outcome.notification.action is StatusNotificationAction.NOTIFIED
        assert wiring.sink.sent[0].recipient.actor_id == "client-1"
        assert outcome.renewals_cancelled == 0

    @pytest.mark.asyncio
    async def test_abandoned_cancels_renewals(self, wiring: _Wiring) -> None:
        outcome = await wiring.service.change_status(
            "matter-1", MatterStatus.ABANDONED, "actor-1"
        )

        assert outcome.renewals_cancelled == 1
        assert (await wiring.tasks.get("ren-1")).done
        assert outcome.notification.action is StatusNotificationAction.NOT_NOTIFIABLE

    @pytest.mark.asyncio
    async def test_same_status_saved_without_notification(
        self, wiring: _Wiring
    ) -> None:
        outcome = await wiring.service.change_status("matter-1", "Filed", "actor-1")

        assert wiring.matters.save_count == 1
        assert outcome.notification.action is StatusNotificationAction.NO_TRANSITION
        assert wiring.sink.attempts == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_unknown_matter(self, wiring: _Wiring) -> None:
        with pytest.raises(MatterNotFoundError) as exc_info:
            await wiring.service.change_status("matter-404", "Granted", "actor-1")

        assert exc_info.value.matter_id == "matter-404"

    @pytest.mark.asyncio
    async def test_unknown_status_not_saved(self, wiring: _Wiring) -> None:
        with pytest.raises(ValueError):
            await wiring.service.change_status("matter-1", "Lapsed", "actor-1")

        assert wiring.matters.save_count == 0

    @pytest.mark.asyncio
    async def test_unattributed_change_rejected(self, wiring: _Wiring) -> None:
        with pytest.raises(ValueError, match="attributed"):
            await wiring.service.change_status("matter-1", "Granted", "")

        assert wiring.matters.save_count == 0

    @pytest.mark.asyncio
    async def test_renewal_failure_does_not_fail_write(self, wiring: _Wiring) -> None:
        wiring.tasks.set_failure(ConnectionError("tasks db down"))

        outcome = await wiring.service.change_status("matter-1", "Refused", "actor-1")

        assert outcome.renewals_cancelled == 0
        assert (await wiring.matters.get("matter-1")).status is MatterStatus.REFUSED

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_write(
        self, wiring: _Wiring
    ) -> None:
        wiring.sink.fail_for("client-1", "HTTP 500")

        outcome = await wiring.service.change_status("matter-1", "Granted", "actor-1")

        assert outcome.notification.action is StatusNotificationAction.DISPATCH_FAILED
        assert (await wiring.matters.get("matter-1")).status is MatterStatus.GRANTED

    @pytest.mark.asyncio
    async def test_side_effects_run_after_save(self, wiring: _Wiring) -> None:
        matter_repo = AsyncMock()
        matter_repo.get.return_value = make_matter("matter-1")
        matter_repo.save.side_effect = ConnectionError("matters db down")
        notifier = AsyncMock()
        renewals = AsyncMock()
        service = MatterStatusService(matter_repo, notifier, renewals, wiring.time)

        with pytest.raises(ConnectionError):
            await service.change_status("matter-1", "Refused", "actor-1")

        renewals.on_status_changed.assert_not_called()
        notifier.handle.assert_not_called()
