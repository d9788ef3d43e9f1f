"""Matter status service - the status write path.

Order of operations:
1. Load the matter (unknown -> MatterNotFoundError).
2. Persist the new, attributed status.
3. Only after the save returns: cancel pending renewals if the new status
   is terminal, then notify.

Side effects after the save never fail the write. Their errors are logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from structlog import get_logger

from ipdocket.application.dtos.notification import StatusNotificationResult
from ipdocket.domain.errors.matter import MatterNotFoundError
from ipdocket.domain.events.matter_status import MatterStatusChangedEvent
from ipdocket.domain.models.matter import Matter, MatterStatus

if TYPE_CHECKING:
    from ipdocket.application.ports.matter_repository import MatterRepositoryProtocol
    from ipdocket.application.ports.time_authority import TimeAuthorityProtocol
    from ipdocket.application.services.renewal_cancellation_service import (
        RenewalCancellationService,
    )
    from ipdocket.application.services.status_transition_notifier import (
        StatusTransitionNotifier,
    )

logger = get_logger(__name__)


@dataclass(frozen=True)
class StatusChangeOutcome:
    """Result of a status write.

    Attributes:
        matter: The matter as persisted.
        event: The transition event emitted after the save.
        renewals_cancelled: Renewal tasks auto-completed.
        notification: What the notifier did.
    """

    matter: Matter
    event: MatterStatusChangedEvent
    renewals_cancelled: int
    notification: StatusNotificationResult


class MatterStatusService:
    """Changes matter statuses and triggers their side effects."""

    def __init__(
        self,
        matter_repo: MatterRepositoryProtocol,
        notifier: StatusTransitionNotifier,
        renewal_cancellation: RenewalCancellationService,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._matter_repo = matter_repo
        self._notifier = notifier
        self._renewals = renewal_cancellation
        self._time = time_authority

    async def change_status(
        self,
        matter_id: str,
        new_status: MatterStatus | str,
        changed_by: str,
    ) -> StatusChangeOutcome:
        """Change the status of a matter.

        Args:
            matter_id: Matter to update.
            new_status: Target status (enum, value, name or code).
            changed_by: Actor making the change.

        Returns:
            StatusChangeOutcome with the saved matter and side effect results.

        Raises:
            MatterNotFoundError: If the matter does not exist.
            ValueError: If the status is unknown or the change is unattributed.
        """
        status = MatterStatus.parse(new_status)
        matter = await self._matter_repo.get(matter_id)
        if matter is None:
            raise MatterNotFoundError(matter_id)

        old_status = matter.status
        updated = matter.with_status(status, changed_by, self._time.now())
        await self._matter_repo.save(updated)

        log = logger.bind(
            matter_id=matter_id,
            old_status=old_status.value,
            new_status=status.value,
            changed_by=changed_by,
        )
        log.info("matter_status_changed")

        event = MatterStatusChangedEvent.from_matter(
            updated,
            old_status=old_status,
            new_status=status,
            occurred_at=self._time.now(),
            changed_by=changed_by,
        )

        cancelled = 0
        try:
            cancelled = await self._renewals.on_status_changed(event)
        except Exception as e:
            log.error("renewal_cancellation_failed", error=str(e) or type(e).__name__)

        notification = await self._notifier.handle(event, updated)
        return StatusChangeOutcome(
            matter=updated,
            event=event,
            renewals_cancelled=cancelled,
            notification=notification,
        )
