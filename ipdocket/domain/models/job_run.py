"""Job run summary domain model.

Each run of the urgent task notification job appends one summary to the
durable run log. Summaries are queryable for operational alerting, so they
round-trip through plain dicts (JSON lines, API responses).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class JobRunOutcome(Enum):
    """Overall outcome of a job run.

    Outcomes:
        COMPLETED: All batches dispatched.
        COMPLETED_WITH_FAILURES: Finished, some recipient batches failed.
        SKIPPED: Run-lock was held by a previous run.
        CANCELLED: Stopped at a batch boundary on request.
        FAILED: Initial data load failed; nothing was dispatched.
    """

    COMPLETED = "completed"
    COMPLETED_WITH_FAILURES = "completed_with_failures"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True, eq=True)
class DispatchFailureEntry:
    """One failed recipient batch.

    Attributes:
        recipient: Actor ID or address that could not be notified.
        reason: Error description.
    """

    recipient: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        """Convert entry to dict."""
        return {"recipient": self.recipient, "reason": self.reason}


@dataclass(frozen=True, eq=True)
class JobRunSummary:
    """Summary of one job run.

    Attributes:
        run_id: Unique identifier of the run (also the log correlation ID).
        job_name: Name of the scheduled job.
        as_of: Reference time the run classified against.
        started_at: When the run started.
        finished_at: When the run ended.
        outcome: Overall outcome.
        scanned: Tasks loaded and considered.
        urgent: Tasks classified URGENT.
        overdue: Tasks classified OVERDUE.
        notified: Tasks included in successfully dispatched batches.
        skipped: Tasks skipped (normal, invalid, already notified, no recipient).
        failed: Failed dispatches.
        failures: Recipient and reason for each failed dispatch.
    """

    run_id: str
    job_name: str
    as_of: datetime
    started_at: datetime
    finished_at: datetime
    outcome: JobRunOutcome
    scanned: int = 0
    urgent: int = 0
    overdue: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0
    failures: tuple[DispatchFailureEntry, ...] = field(default_factory=tuple)

    @property
    def exit_status(self) -> str:
        """Human-readable status for the scheduler log."""
        if self.outcome is JobRunOutcome.COMPLETED_WITH_FAILURES:
            return f"completed with {self.failed} failures"
        return self.outcome.value

    def to_dict(self) -> dict[str, Any]:
        """Convert summary to dict for the run log."""
        return {
            "run_id": self.run_id,
            "job_name": self.job_name,
            "as_of": self.as_of.isoformat(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "outcome": self.outcome.value,
            "scanned": self.scanned,
            "urgent": self.urgent,
            "overdue": self.overdue,
            "notified": self.notified,
            "skipped": self.skipped,
            "failed": self.failed,
            "failures": [entry.to_dict() for entry in self.failures],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobRunSummary:
        """Rebuild a summary from its dict form.

        Args:
            data: Output of to_dict().

        Returns:
            The JobRunSummary.
        """
        return cls(
            run_id=data["run_id"],
            job_name=data["job_name"],
            as_of=datetime.fromisoformat(data["as_of"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            finished_at=datetime.fromisoformat(data["finished_at"]),
            outcome=JobRunOutcome(data["outcome"]),
            scanned=int(data.get("scanned", 0)),
            urgent=int(data.get("urgent", 0)),
            overdue=int(data.get("overdue", 0)),
            notified=int(data.get("notified", 0)),
            skipped=int(data.get("skipped", 0)),
            failed=int(data.get("failed", 0)),
            failures=tuple(
                DispatchFailureEntry(recipient=f["recipient"], reason=f["reason"])
                for f in data.get("failures", [])
            ),
        )
