"""Status transition notifier.

Reacts to committed matter status changes and sends at most one
notification per (matter, old status, new status, day).

Decision rule: a notification is warranted only if the status actually
changed AND the routing table maps the new status to a recipient rule
other than ``notify-none``.

Failure semantics:
- Recipient resolution failures are logged and the event is dropped.
  A later status change supersedes a stale notification, so nothing is
  retried.
- Dispatch failures are logged and reported in the result. The dedup
  claim is released so a retried write can try again.
- Nothing is raised to the write path.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from structlog import get_logger

from ipdocket.application.dtos.notification import (
    StatusNotificationAction,
    StatusNotificationResult,
)
from ipdocket.application.ports.notification_sink import TEMPLATE_STATUS_CHANGE
from ipdocket.config.notification_config import (
    DEFAULT_STATUS_NOTIFICATION_CONFIG,
    RecipientRule,
    StatusNotificationConfig,
)
from ipdocket.domain.errors.notification import RecipientResolutionError
from ipdocket.domain.events.matter_status import MatterStatusChangedEvent
from ipdocket.domain.models.matter import MatterStatus
from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)
from ipdocket.domain.services.language import validate_language
from ipdocket.domain.services.notification_text import status_change_subject

if TYPE_CHECKING:
    from ipdocket.application.ports.actor_repository import ActorRepositoryProtocol
    from ipdocket.application.ports.notification_record_repository import (
        NotificationRecordRepositoryProtocol,
    )
    from ipdocket.application.ports.notification_sink import NotificationSinkProtocol
    from ipdocket.application.ports.time_authority import TimeAuthorityProtocol
    from ipdocket.domain.models.actor import Actor
    from ipdocket.domain.models.matter import Matter

logger = get_logger(__name__)


class StatusTransitionNotifier:
    """Sends notifications for matter status transitions.

    Called synchronously by the write path right after the new status is
    committed. Safe to call repeatedly for the same transition.

    Example:
        >>> notifier = StatusTransitionNotifier(
        ...     actor_repo=actor_repo,
        ...     record_repo=record_repo,
        ...     sink=sink,
        ...     time_authority=time_authority,
        ... )
        >>> result = await notifier.on_status_changed(matter, "Pending", "Granted")
        >>> result.was_notified
        True
    """

    def __init__(
        self,
        actor_repo: ActorRepositoryProtocol,
        record_repo: NotificationRecordRepositoryProtocol,
        sink: NotificationSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        config: StatusNotificationConfig | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            actor_repo: Resolves client and responsible actors.
            record_repo: Stores dedup records.
            sink: Delivers notifications.
            time_authority: Source of the current time.
            config: Routing table and timeouts. Defaults apply if omitted.
        """
        self._actor_repo = actor_repo
        self._record_repo = record_repo
        self._sink = sink
        self._time = time_authority
        self._config = config or DEFAULT_STATUS_NOTIFICATION_CONFIG

    async def on_status_changed(
        self,
        matter: Matter,
        old_status: MatterStatus | str,
        new_status: MatterStatus | str,
        changed_by: str | None = None,
    ) -> StatusNotificationResult:
        """Handle a status change of ``matter``.

        Args:
            matter: The matter, already persisted with its new status.
            old_status: Status before the change.
            new_status: Status after the change.
            changed_by: Actor who made the change (defaults to the
                matter's attribution).

        Returns:
            StatusNotificationResult describing what was done.

        Raises:
            ValueError: If a status is not a known MatterStatus.
        """
        event = MatterStatusChangedEvent.from_matter(
            matter,
            old_status=MatterStatus.parse(old_status),
            new_status=MatterStatus.parse(new_status),
            occurred_at=self._time.now(),
            changed_by=changed_by,
        )
        return await self.handle(event, matter)

    async def handle(
        self, event: MatterStatusChangedEvent, matter: Matter
    ) -> StatusNotificationResult:
        """Handle an already built status change event.

        Args:
            event: The transition.
            matter: The matter the event references.

        Returns:
            StatusNotificationResult describing what was done.
        """
        log = logger.bind(
            event_id=event.event_id,
            matter_id=event.matter_id,
            old_status=event.old_status.value,
            new_status=event.new_status.value,
        )

        if not event.is_transition:
            log.debug("status_unchanged_no_notification")
            return StatusNotificationResult(
                matter_id=event.matter_id,
                action=StatusNotificationAction.NO_TRANSITION,
                message="Status did not change",
            )

        rule = self._config.rule_for(event.new_status)
        if rule is RecipientRule.NOTIFY_NONE:
            log.debug("status_not_notifiable")
            return StatusNotificationResult(
                matter_id=event.matter_id,
                action=StatusNotificationAction.NOT_NOTIFIABLE,
                message=f"{event.new_status.value} is not a notifiable status",
            )

        try:
            recipient = await self._resolve_recipient(matter, rule)
        except RecipientResolutionError as e:
            log.warning(
                "status_notification_dropped",
                rule=rule.value,
                reason=e.reason,
            )
            return StatusNotificationResult(
                matter_id=event.matter_id,
                action=StatusNotificationAction.DROPPED,
                message=e.reason,
            )

        record = NotificationRecord(
            subject_id=event.transition_key,
            kind=NotificationKind.STATUS_CHANGE,
            day=event.occurred_at.date(),
            sent_at=self._time.now(),
        )
        timeout = self._config.io_timeout_seconds

        try:
            claimed = await asyncio.wait_for(
                self._record_repo.try_claim(record), timeout=timeout
            )
        except Exception as e:
            log.error("status_notification_claim_failed", error=str(e))
            return StatusNotificationResult(
                matter_id=event.matter_id,
                action=StatusNotificationAction.DISPATCH_FAILED,
                recipient_id=recipient.actor_id,
                message=f"Could not record notification: {e}",
            )

        if not claimed:
            log.info("status_notification_duplicate", transition=event.transition_key)
            return StatusNotificationResult(
                matter_id=event.matter_id,
                action=StatusNotificationAction.DUPLICATE,
                recipient_id=recipient.actor_id,
                message="Transition already notified today",
            )

        payload = self._build_payload(event, matter, recipient, rule)
        error: str | None
        try:
            result = await asyncio.wait_for(
                self._sink.send(recipient, TEMPLATE_STATUS_CHANGE, payload),
                timeout=timeout,
            )
            error = None if result.success else (result.error or "rejected by sink")
        except Exception as e:
            error = str(e) or type(e).__name__

        if error is not None:
            log.error(
                "status_notification_failed",
                recipient_id=recipient.actor_id,
                error=error,
            )
            await self._release_claim(record, log)
            return StatusNotificationResult(
                matter_id=event.matter_id,
                action=StatusNotificationAction.DISPATCH_FAILED,
                recipient_id=recipient.actor_id,
                message=error,
            )

        log.info(
            "status_notification_sent",
            recipient_id=recipient.actor_id,
            rule=rule.value,
        )
        return StatusNotificationResult(
            matter_id=event.matter_id,
            action=StatusNotificationAction.NOTIFIED,
            recipient_id=recipient.actor_id,
            message=f"Notified {recipient.actor_id}",
        )

    async def _resolve_recipient(self, matter: Matter, rule: RecipientRule) -> Actor:
        """Resolve the actor a rule points to.

        Raises:
            RecipientResolutionError: If the reference is missing, the
                actor is unknown or has no email.
        """
        if rule is RecipientRule.NOTIFY_CLIENT:
            actor_id, role = matter.client_id, "client"
        else:
            actor_id, role = matter.responsible_id, "responsible"

        if not actor_id:
            raise RecipientResolutionError(matter.matter_id, f"no {role} set")

        try:
            actor = await asyncio.wait_for(
                self._actor_repo.get(actor_id),
                timeout=self._config.io_timeout_seconds,
            )
        except Exception as e:
            raise RecipientResolutionError(
                matter.matter_id, f"{role} lookup failed: {e}"
            ) from e

        if actor is None:
            raise RecipientResolutionError(matter.matter_id, f"{role} {actor_id} not found")
        if not actor.is_reachable:
            raise RecipientResolutionError(
                matter.matter_id, f"{role} {actor_id} has no email address"
            )
        return actor

    def _build_payload(
        self,
        event: MatterStatusChangedEvent,
        matter: Matter,
        recipient: Actor,
        rule: RecipientRule,
    ) -> dict[str, Any]:
        language = validate_language(recipient.language, self._config.default_language)
        return {
            "event_id": event.event_id,
            "matter_id": event.matter_id,
            "matter_uid": matter.uid,
            "old_status": event.old_status.value,
            "new_status": event.new_status.value,
            "changed_by": event.changed_by,
            "occurred_at": event.occurred_at.isoformat(),
            "rule": rule.value,
            "language": language,
            "subject": status_change_subject(matter.uid, event.new_status, language),
        }

    async def _release_claim(self, record: NotificationRecord, log: Any) -> None:
        try:
            await asyncio.wait_for(
                self._record_repo.delete(record.subject_id, record.kind, record.day),
                timeout=self._config.io_timeout_seconds,
            )
        except Exception as e:
            log.error("status_notification_claim_release_failed", error=str(e))
