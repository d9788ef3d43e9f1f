"""In-memory task repository stub.

For development and testing only; production reads tasks from the
docketing database.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ipdocket.application.ports.task_repository import TaskRepositoryProtocol
from ipdocket.domain.models.task import Task

logger = logging.getLogger(__name__)


class TaskRepositoryStub(TaskRepositoryProtocol):
    """In-memory task storage.

    Attributes:
        _tasks: Map of task_id to Task.
        _failure: Error raised by every read when set (for testing).
        _lock: Async lock for safe concurrent access.
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._tasks: dict[str, Task] = {t.task_id: t for t in tasks or []}
        self._failure: Exception | None = None
        self._lock = asyncio.Lock()

    async def list_open_tasks_due_before(self, cutoff: datetime) -> list[Task]:
        async with self._lock:
            self._raise_if_failing()
            return [
                t
                for t in self._tasks.values()
                if not t.done and _due_on_or_before(t, cutoff)
            ]

    async def list_open_tasks_for_matter(
        self, matter_id: str, code: str | None = None
    ) -> list[Task]:
        async with self._lock:
            self._raise_if_failing()
            return [
                t
                for t in self._tasks.values()
                if t.matter_id == matter_id
                and not t.done
                and (code is None or t.code == code)
            ]

    async def get(self, task_id: str) -> Task | None:
        async with self._lock:
            self._raise_if_failing()
            return self._tasks.get(task_id)

    async def save(self, task: Task) -> None:
        async with self._lock:
            self._tasks[task.task_id] = task
            logger.debug("Saved task %s (done=%s)", task.task_id, task.done)

    # --- Test helpers ---

    def add(self, *tasks: Task) -> None:
        """Add tasks directly (for testing)."""
        for task in tasks:
            self._tasks[task.task_id] = task

    def set_failure(self, error: Exception | None) -> None:
        """Make every read raise ``error`` (None to clear)."""
        self._failure = error

    def _raise_if_failing(self) -> None:
        if self._failure is not None:
            raise self._failure


def _due_on_or_before(task: Task, cutoff: datetime) -> bool:
    # Malformed due dates are returned so the caller can report them.
    due = task.due_date
    return due is None or due.tzinfo is None or due <= cutoff
