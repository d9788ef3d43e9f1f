"""Urgency tiers for task deadlines."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

# Shared with the badge convention of the UI layer.
URGENT_WINDOW: timedelta = timedelta(days=14)


class UrgencyTier(Enum):
    """Deadline proximity of a task.

    Tiers:
        NORMAL: Due later than the urgent window.
        URGENT: Due within the urgent window (inclusive).
        OVERDUE: Due date already passed.
    """

    NORMAL = "normal"
    URGENT = "urgent"
    OVERDUE = "overdue"

    @property
    def needs_notification(self) -> bool:
        """Whether the scheduled job should notify about this tier."""
        return self is not UrgencyTier.NORMAL
