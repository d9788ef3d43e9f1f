"""Notification sink port - the outbound dispatcher contract.

The sink owns presentation and delivery (email rendering, in-app badges).
Services hand it a recipient, a template kind and a structured payload
containing identifiers, urgency tiers or status transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ipdocket.domain.models.actor import Actor

TEMPLATE_URGENT_TASKS: str = "urgent_tasks"
TEMPLATE_TASKS_SUMMARY: str = "tasks_summary"
TEMPLATE_STATUS_CHANGE: str = "status_change"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one send() call.

    Attributes:
        success: Whether the sink accepted the notification.
        error: Failure reason when success is False.
        message_id: Sink-assigned identifier, if any.
    """

    success: bool
    error: str | None = None
    message_id: str | None = None

    @classmethod
    def ok(cls, message_id: str | None = None) -> DispatchResult:
        return cls(success=True, message_id=message_id)

    @classmethod
    def failed(cls, error: str) -> DispatchResult:
        return cls(success=False, error=error)


class NotificationSinkProtocol(Protocol):
    """Protocol for notification delivery."""

    async def send(
        self,
        recipient: Actor,
        template_kind: str,
        payload: dict[str, Any],
    ) -> DispatchResult:
        """Deliver one notification.

        Args:
            recipient: Who to notify (must have an email).
            template_kind: One of the TEMPLATE_* constants.
            payload: JSON-serializable notification data.

        Returns:
            DispatchResult. Implementations may also raise on transport
            errors; callers treat both as a failed dispatch.
        """
        ...
