"""Notification record domain model.

A record is written after a successful dispatch and checked before the
next one, enforcing at-most-one notification per subject, kind and day.
Records are keyed by (subject_id, kind, day) so writes are idempotent
upserts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class NotificationKind(Enum):
    """What a notification was about.

    Kinds:
        URGENT_TASK: A task included in an urgent tasks batch.
        STATUS_CHANGE: A matter status transition.
        TASKS_SUMMARY: The daily system-wide summary.
    """

    URGENT_TASK = "urgent_task"
    STATUS_CHANGE = "status_change"
    TASKS_SUMMARY = "tasks_summary"


# Subject of the daily summary record.
SYSTEM_SUBJECT_ID: str = "system"


@dataclass(frozen=True, eq=True)
class NotificationRecord:
    """Proof that a notification was sent.

    Attributes:
        subject_id: Task ID, status transition key, or "system".
        kind: Notification kind.
        day: Calendar day the notification counts against.
        sent_at: Dispatch time (timezone-aware).
    """

    subject_id: str
    kind: NotificationKind
    day: date
    sent_at: datetime

    def __post_init__(self) -> None:
        """Validate record fields."""
        if not self.subject_id:
            raise ValueError("subject_id cannot be empty")
        if self.sent_at.tzinfo is None:
            raise ValueError("sent_at must be timezone-aware")

    @property
    def key(self) -> tuple[str, NotificationKind, date]:
        """Idempotency key of the record."""
        return (self.subject_id, self.kind, self.day)

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dict for storage."""
        return {
            "subject_id": self.subject_id,
            "kind": self.kind.value,
            "day": self.day.isoformat(),
            "sent_at": self.sent_at.isoformat(),
        }
