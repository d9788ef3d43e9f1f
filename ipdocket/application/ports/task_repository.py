"""Task repository port.

Read and update access to docketed tasks. Queries return plain frozen
Task objects; traversal to the owning matter goes through
MatterRepositoryProtocol using Task.matter_id.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ipdocket.domain.models.task import Task


class TaskRepositoryProtocol(Protocol):
    """Protocol for task storage operations.

    Implementations may use PostgreSQL, in-memory storage, or other
    backends. Implementations raise on I/O errors; callers decide whether
    an error is fatal.

    Methods:
        list_open_tasks_due_before: Scan for the urgent task job
        list_open_tasks_for_matter: Open tasks of one matter
        get: Single task lookup
        save: Persist a task (insert or replace)
    """

    async def list_open_tasks_due_before(self, cutoff: datetime) -> list[Task]:
        """Return incomplete tasks due on or before ``cutoff``.

        Overdue tasks are included without a lower bound.

        Args:
            cutoff: Inclusive upper bound on the due date.

        Returns:
            Incomplete tasks, in no particular order.
        """
        ...

    async def list_open_tasks_for_matter(
        self, matter_id: str, code: str | None = None
    ) -> list[Task]:
        """Return incomplete tasks of a matter, optionally filtered by code."""
        ...

    async def get(self, task_id: str) -> Task | None:
        """Return a task by ID, or None."""
        ...

    async def save(self, task: Task) -> None:
        """Persist a task, replacing any stored version."""
        ...
