"""In-memory run log stub."""

from __future__ import annotations

import asyncio

from ipdocket.application.ports.run_log import RunLogProtocol
from ipdocket.domain.models.job_run import JobRunSummary


class RunLogStub(RunLogProtocol):
    """Append-only in-memory run log.

    Attributes:
        _entries: Summaries in append order.
    """

    def __init__(self) -> None:
        self._entries: list[JobRunSummary] = []
        self._lock = asyncio.Lock()

    async def append(self, summary: JobRunSummary) -> None:
        async with self._lock:
            self._entries.append(summary)

    async def list_recent(
        self, limit: int = 20, job_name: str | None = None
    ) -> list[JobRunSummary]:
        async with self._lock:
            entries = [
                e for e in self._entries if job_name is None or e.job_name == job_name
            ]
            return list(reversed(entries))[:limit]

    @property
    def entries(self) -> list[JobRunSummary]:
        """All entries in append order (for testing)."""
        return list(self._entries)
