"""Task domain model.

A task is a deadline-bound action item owned by exactly one matter.

Invariants:
- The due date is immutable once the task is marked complete.
- Completed tasks are never scanned for urgency.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from ipdocket.domain.errors.task import TaskCompletedError

# Code of renewal tasks; renewals have their own reminder cycle.
RENEWAL_TASK_CODE: str = "REN"


@dataclass(frozen=True, eq=True)
class Task:
    """A docketed task.

    Attributes:
        task_id: Unique identifier.
        matter_id: ID of the owning matter.
        due_date: Timezone-aware deadline. May be None on malformed data.
        done: Completion flag.
        code: Task code (e.g. "REN" for renewal).
        detail: Descriptive text shown to the recipient.
        done_date: When the task was completed.
        notes: Free-text notes.
    """

    task_id: str
    matter_id: str
    due_date: datetime | None
    done: bool = False
    code: str = ""
    detail: str = ""
    done_date: datetime | None = None
    notes: str = ""

    def __post_init__(self) -> None:
        """Validate task fields."""
        if not self.task_id:
            raise ValueError("task_id cannot be empty")
        if not self.matter_id:
            raise ValueError("matter_id cannot be empty")

    @property
    def is_renewal(self) -> bool:
        """Whether this is a renewal task."""
        return self.code == RENEWAL_TASK_CODE

    def with_due_date(self, due_date: datetime) -> Task:
        """Create new task with a different due date.

        Raises:
            TaskCompletedError: If the task is already done.
        """
        if self.done:
            raise TaskCompletedError(self.task_id)
        return replace(self, due_date=due_date)

    def mark_done(self, done_at: datetime, note: str | None = None) -> Task:
        """Create new task marked complete.

        Args:
            done_at: Completion time.
            note: Optional line appended to existing notes.

        Returns:
            New completed Task.
        """
        notes = self.notes
        if note:
            notes = f"{notes}\n{note}" if notes else note
        return replace(self, done=True, done_date=done_at, notes=notes)
