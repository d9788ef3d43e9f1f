"""Task errors.

Raised while classifying or mutating tasks. Classification errors are
recovered locally by the urgent task job (the task is skipped and logged);
they never abort a run.
"""

from __future__ import annotations

from ipdocket.domain.exceptions import IpDocketError


class InvalidTaskError(IpDocketError):
    """Raised when a task cannot be classified.

    Typically an incomplete task without a due date, or a due date
    without timezone information.

    Attributes:
        task_id: ID of the malformed task.
        reason: What is wrong with it.
    """

    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(f"Invalid task {task_id}: {reason}")
        self.task_id = task_id
        self.reason = reason


class TaskCompletedError(IpDocketError):
    """Raised when the due date of a completed task is changed."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} is completed; its due date is frozen")
        self.task_id = task_id
