"""Deadline classifier.

Maps a task and a reference time to an urgency tier. Precedence, first
match wins:

1. OVERDUE: due date strictly before ``now``.
2. URGENT: due date within ``[now, now + window]``, both ends inclusive.
3. NORMAL: otherwise.

The default window matches the badge convention of the UI layer so the
scheduled notification and the on-screen badge never disagree.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ipdocket.domain.errors.task import InvalidTaskError
from ipdocket.domain.models.task import Task
from ipdocket.domain.models.urgency import URGENT_WINDOW, UrgencyTier


def classify(
    task: Task,
    now: datetime,
    window: timedelta = URGENT_WINDOW,
) -> UrgencyTier:
    """Classify the urgency of a task.

    Pure function: no side effects, no clock access.

    Args:
        task: The task to classify.
        now: Reference time (timezone-aware).
        window: Lookahead of the URGENT tier.

    Returns:
        The task's UrgencyTier.

    Raises:
        InvalidTaskError: If an incomplete task has no due date, or if
            either timestamp is timezone-naive.
    """
    if now.tzinfo is None:
        raise InvalidTaskError(task.task_id, "reference time must be timezone-aware")

    due = task.due_date
    if due is None:
        if task.done:
            return UrgencyTier.NORMAL
        raise InvalidTaskError(task.task_id, "incomplete task has no due date")
    if due.tzinfo is None:
        raise InvalidTaskError(task.task_id, "due date must be timezone-aware")

    if due < now:
        return UrgencyTier.OVERDUE
    if due <= now + window:
        return UrgencyTier.URGENT
    return UrgencyTier.NORMAL
