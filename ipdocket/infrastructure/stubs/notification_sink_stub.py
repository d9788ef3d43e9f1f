"""Recording notification sink stub.

Records every send() call instead of delivering it. Failures can be
injected per recipient to exercise per-batch isolation.

Usage Examples:
    sink = RecordingNotificationSinkStub()
    sink.fail_for("actor-2", error="SMTP 550")
    ...
    assert [s.recipient.actor_id for s in sink.sent] == ["actor-1"]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ipdocket.application.ports.notification_sink import (
    DispatchResult,
    NotificationSinkProtocol,
)
from ipdocket.domain.models.actor import Actor


@dataclass(frozen=True)
class SentNotification:
    """One recorded send() call."""

    recipient: Actor
    template_kind: str
    payload: dict[str, Any]


class RecordingNotificationSinkStub(NotificationSinkProtocol):
    """Sink that records notifications in memory.

    Attributes:
        sent: Successfully "delivered" notifications, in order.
        attempts: Every send() call, including failed ones.
    """

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []
        self.attempts: list[SentNotification] = []
        self._failures: dict[str, str] = {}
        self._raises: dict[str, Exception] = {}

    async def send(
        self,
        recipient: Actor,
        template_kind: str,
        payload: dict[str, Any],
    ) -> DispatchResult:
        notification = SentNotification(recipient, template_kind, payload)
        self.attempts.append(notification)
        if recipient.actor_id in self._raises:
            raise self._raises[recipient.actor_id]
        if recipient.actor_id in self._failures:
            return DispatchResult.failed(self._failures[recipient.actor_id])
        self.sent.append(notification)
        return DispatchResult.ok(message_id=f"stub-{len(self.sent)}")

    # --- Test helpers ---

    def fail_for(self, recipient_id: str, error: str = "delivery rejected") -> None:
        """Return a failed DispatchResult for this recipient."""
        self._failures[recipient_id] = error

    def raise_for(self, recipient_id: str, error: Exception) -> None:
        """Raise ``error`` when sending to this recipient."""
        self._raises[recipient_id] = error

    def sent_with(self, template_kind: str) -> list[SentNotification]:
        """Delivered notifications of one template kind."""
        return [s for s in self.sent if s.template_kind == template_kind]
