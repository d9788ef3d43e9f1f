"""Matter domain model.

A matter is a tracked IP case (patent or trademark application or
registration). Its workflow status is one of a finite set of values;
every status change is attributable to an actor and a timestamp.

Tasks are not embedded: they reference their matter by ID and are loaded
through the task repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class MatterStatus(Enum):
    """Workflow status of a matter.

    Values are the display names used in notifications; each status also
    carries the short event code used by the docketing rules.
    """

    PENDING = "Pending"
    FILED = "Filed"
    PUBLISHED = "Published"
    GRANTED = "Granted"
    REGISTERED = "Registered"
    REFUSED = "Refused"
    ABANDONED = "Abandoned"
    EXPIRED = "Expired"
    WITHDRAWN = "Withdrawn"
    DEAD = "Dead"

    @property
    def code(self) -> str:
        """Short event code of the status (e.g. GRT for Granted)."""
        return _STATUS_CODES[self]

    @classmethod
    def parse(cls, value: str | MatterStatus) -> MatterStatus:
        """Parse a status from its value, name or event code.

        Args:
            value: "Granted", "GRANTED", "GRT" or a MatterStatus.

        Returns:
            The matching MatterStatus.

        Raises:
            ValueError: If the value is not a known status.
        """
        if isinstance(value, MatterStatus):
            return value
        text = value.strip()
        for status in cls:
            if text == status.value or text.upper() == status.name:
                return status
            if text.upper() == status.code:
                return status
        raise ValueError(f"Unknown matter status: {value!r}")


_STATUS_CODES: dict[MatterStatus, str] = {
    MatterStatus.PENDING: "PEN",
    MatterStatus.FILED: "FIL",
    MatterStatus.PUBLISHED: "PUB",
    MatterStatus.GRANTED: "GRT",
    MatterStatus.REGISTERED: "REG",
    MatterStatus.REFUSED: "REF",
    MatterStatus.ABANDONED: "ABA",
    MatterStatus.EXPIRED: "EXP",
    MatterStatus.WITHDRAWN: "WIT",
    MatterStatus.DEAD: "DEA",
}

# Statuses after which pending renewals have no purpose.
RENEWAL_CANCELLING_STATUSES: frozenset[MatterStatus] = frozenset(
    {
        MatterStatus.REFUSED,
        MatterStatus.ABANDONED,
        MatterStatus.EXPIRED,
        MatterStatus.WITHDRAWN,
    }
)


@dataclass(frozen=True, eq=True)
class Matter:
    """An IP matter.

    Attributes:
        matter_id: Unique identifier.
        uid: Human-readable reference (e.g. "EP1234-A").
        status: Current workflow status.
        client_id: Actor ID of the owning client, if any.
        responsible_id: Actor ID of the responsible attorney, if any.
        dead: True when the matter is closed for docketing.
        status_changed_by: Actor who made the last status change.
        status_changed_at: When the last status change happened.
    """

    matter_id: str
    uid: str
    status: MatterStatus
    client_id: str | None = None
    responsible_id: str | None = None
    dead: bool = False
    status_changed_by: str | None = None
    status_changed_at: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate matter fields."""
        if not self.matter_id:
            raise ValueError("matter_id cannot be empty")
        if not isinstance(self.status, MatterStatus):
            raise ValueError(f"status must be a MatterStatus, got {self.status!r}")

    def with_status(
        self,
        new_status: MatterStatus,
        changed_by: str,
        changed_at: datetime,
    ) -> Matter:
        """Create new matter with an attributed status change.

        Since Matter is frozen, returns new instance. A matter moving to
        DEAD is also flagged dead for docketing.

        Args:
            new_status: The status to transition to.
            changed_by: Actor making the change.
            changed_at: Timezone-aware time of the change.

        Returns:
            New Matter with updated status and attribution.
        """
        if not changed_by:
            raise ValueError("status changes must be attributed to an actor")
        if changed_at.tzinfo is None:
            raise ValueError("changed_at must be timezone-aware")
        return replace(
            self,
            status=new_status,
            dead=self.dead or new_status is MatterStatus.DEAD,
            status_changed_by=changed_by,
            status_changed_at=changed_at,
        )
