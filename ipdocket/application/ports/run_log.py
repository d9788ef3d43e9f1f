"""Run log port - durable, append-only record of job runs.

Queried by operators and alerting (e.g. "last run failed", "failures > 0").
"""

from __future__ import annotations

from typing import Protocol

from ipdocket.domain.models.job_run import JobRunSummary


class RunLogProtocol(Protocol):
    """Protocol for the job run log."""

    async def append(self, summary: JobRunSummary) -> None:
        """Append one run summary. Existing entries are never modified."""
        ...

    async def list_recent(
        self, limit: int = 20, job_name: str | None = None
    ) -> list[JobRunSummary]:
        """Return the most recent summaries, newest first."""
        ...
