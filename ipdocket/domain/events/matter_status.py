"""Matter status domain events.

A MatterStatusChangedEvent is created once per status transition, never
mutated, and consumed by the status transition notifier and the renewal
cancellation service. It references the matter by ID only, so it can be
serialized for asynchronous delivery and outlive the Matter object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from ipdocket.domain.models.matter import MatterStatus

if TYPE_CHECKING:
    from ipdocket.domain.models.matter import Matter


MATTER_STATUS_CHANGED_EVENT_TYPE: str = "matter.status.changed"
MATTER_STATUS_EVENT_SCHEMA_VERSION: str = "1.0.0"


@dataclass(frozen=True, eq=True)
class MatterStatusChangedEvent:
    """Event emitted after a matter status change is committed.

    Attributes:
        matter_id: The matter whose status changed.
        old_status: Status before the change.
        new_status: Status after the change.
        occurred_at: When the change was committed (UTC).
        changed_by: Actor who made the change, if known.
        event_id: Unique identifier for this event.
        event_type: The event type identifier.
        schema_version: Schema version of the serialized form.
    """

    matter_id: str
    old_status: MatterStatus
    new_status: MatterStatus
    occurred_at: datetime
    changed_by: str | None = None
    event_id: str = field(default_factory=lambda: str(uuid4()))
    event_type: str = field(default=MATTER_STATUS_CHANGED_EVENT_TYPE, init=False)
    schema_version: str = field(
        default=MATTER_STATUS_EVENT_SCHEMA_VERSION, init=False
    )

    @property
    def is_transition(self) -> bool:
        """Whether the status actually changed."""
        return self.old_status is not self.new_status

    @property
    def transition_key(self) -> str:
        """Identity of the transition, independent of when it happened.

        Combined with a calendar day it forms the notification idempotency
        key, so retried writes of the same transition share it.
        """
        return f"{self.matter_id}:{self.old_status.code}->{self.new_status.code}"

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dict for storage/transmission."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "matter_id": self.matter_id,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "changed_by": self.changed_by,
            "occurred_at": self.occurred_at.isoformat(),
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_matter(
        cls,
        matter: Matter,
        old_status: MatterStatus,
        new_status: MatterStatus,
        occurred_at: datetime,
        changed_by: str | None = None,
    ) -> MatterStatusChangedEvent:
        """Create event from a Matter domain model.

        Attribution falls back to the matter's own status_changed_by and
        status_changed_at when not given explicitly.

        Args:
            matter: The matter after the change.
            old_status: Status before the change.
            new_status: Status after the change.
            occurred_at: Fallback time if the matter carries none.
            changed_by: Actor who made the change.

        Returns:
            A new MatterStatusChangedEvent instance.
        """
        return cls(
            matter_id=matter.matter_id,
            old_status=old_status,
            new_status=new_status,
            occurred_at=matter.status_changed_at or occurred_at,
            changed_by=changed_by or matter.status_changed_by,
        )
