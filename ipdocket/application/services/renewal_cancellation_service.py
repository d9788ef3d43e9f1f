"""Renewal cancellation service.

When a matter moves to Refused, Abandoned, Expired or Withdrawn, its
pending renewals can no longer be paid. They are completed automatically
so they drop out of urgency scanning and reminders.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from structlog import get_logger

from ipdocket.domain.models.matter import RENEWAL_CANCELLING_STATUSES
from ipdocket.domain.models.task import RENEWAL_TASK_CODE

if TYPE_CHECKING:
    from ipdocket.application.ports.task_repository import TaskRepositoryProtocol
    from ipdocket.application.ports.time_authority import TimeAuthorityProtocol
    from ipdocket.domain.events.matter_status import MatterStatusChangedEvent

logger = get_logger(__name__)

AUTO_CANCEL_NOTE_TEMPLATE: str = "Auto-cancelled due to matter status: {status}"


class RenewalCancellationService:
    """Completes open renewal tasks of matters that reached a terminal status."""

    def __init__(
        self,
        task_repo: TaskRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        io_timeout_seconds: float = 10.0,
    ) -> None:
        self._task_repo = task_repo
        self._time = time_authority
        self._timeout = io_timeout_seconds

    async def on_status_changed(self, event: MatterStatusChangedEvent) -> int:
        """Cancel open renewals of the event's matter if the status warrants it.

        Args:
            event: The committed status change.

        Returns:
            Number of renewal tasks completed.

        Raises:
            Exception: Repository errors propagate; the caller decides how
                to report them.
        """
        if not event.is_transition or event.new_status not in RENEWAL_CANCELLING_STATUSES:
            return 0

        log = logger.bind(
            matter_id=event.matter_id,
            new_status=event.new_status.value,
        )
        renewals = await asyncio.wait_for(
            self._task_repo.list_open_tasks_for_matter(
                event.matter_id, code=RENEWAL_TASK_CODE
            ),
            timeout=self._timeout,
        )

        note = AUTO_CANCEL_NOTE_TEMPLATE.format(status=event.new_status.value)
        done_at = event.occurred_at or self._time.now()
        cancelled = 0
        for task in renewals:
            if task.done or not task.is_renewal:
                continue
            await asyncio.wait_for(
                self._task_repo.save(task.mark_done(done_at, note)),
                timeout=self._timeout,
            )
            cancelled += 1
            log.info("renewal_task_auto_cancelled", task_id=task.task_id)

        if cancelled:
            log.info("renewal_tasks_cancelled", count=cancelled)
        return cancelled
