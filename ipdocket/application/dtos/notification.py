"""Notification pipeline DTOs.

Results returned by the status transition notifier and the batch shape
used internally by the urgent task job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ipdocket.domain.models.actor import Actor
from ipdocket.domain.models.task import Task
from ipdocket.domain.models.urgency import UrgencyTier


class StatusNotificationAction(Enum):
    """What the status transition notifier did with an event."""

    NOTIFIED = "notified"
    NO_TRANSITION = "no_transition"
    NOT_NOTIFIABLE = "not_notifiable"
    DUPLICATE = "duplicate"
    DROPPED = "dropped"
    DISPATCH_FAILED = "dispatch_failed"


@dataclass(frozen=True)
class StatusNotificationResult:
    """Result of handling one status change.

    Attributes:
        matter_id: Matter the event was about.
        action: What happened.
        recipient_id: Actor notified (or targeted), if resolved.
        message: Human-readable detail for logs and callers.
    """

    matter_id: str
    action: StatusNotificationAction
    recipient_id: str | None = None
    message: str = ""

    @property
    def was_notified(self) -> bool:
        return self.action is StatusNotificationAction.NOTIFIED


@dataclass(frozen=True)
class ClassifiedTask:
    """A task paired with its urgency tier and matter reference."""

    task: Task
    tier: UrgencyTier
    matter_uid: str

    def to_payload(self) -> dict[str, Any]:
        """Payload entry for the dispatcher."""
        due = self.task.due_date
        return {
            "task_id": self.task.task_id,
            "matter_id": self.task.matter_id,
            "matter_uid": self.matter_uid,
            "code": self.task.code,
            "detail": self.task.detail,
            "due_date": due.isoformat() if due is not None else None,
            "urgency": self.tier.value,
        }


@dataclass
class UrgentTaskBatch:
    """All urgent tasks of one recipient for one run.

    Attributes:
        recipient: Actor receiving the batch.
        tasks: Classified tasks, in due date order.
    """

    recipient: Actor
    tasks: list[ClassifiedTask] = field(default_factory=list)

    @property
    def overdue(self) -> list[ClassifiedTask]:
        return [t for t in self.tasks if t.tier is UrgencyTier.OVERDUE]

    @property
    def due_soon(self) -> list[ClassifiedTask]:
        return [t for t in self.tasks if t.tier is UrgencyTier.URGENT]
