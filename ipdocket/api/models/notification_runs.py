"""Notification run response models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ipdocket.domain.models.job_run import JobRunSummary


class DispatchFailureResponse(BaseModel):
    """One failed recipient batch."""

    recipient: str
    reason: str


class JobRunResponse(BaseModel):
    """One run of the urgent task notification job.

    Attributes:
        run_id: Unique run identifier (the log correlation ID).
        job_name: Scheduler command name.
        as_of: Reference time of the classification.
        started_at: Run start.
        finished_at: Run end.
        outcome: completed, completed_with_failures, skipped, cancelled or failed.
        exit_status: Human-readable status, e.g. "completed with 2 failures".
        scanned / urgent / overdue / notified / skipped / failed: Counters.
        failures: Recipient and reason of each failed dispatch.
    """

    run_id: str
    job_name: str
    as_of: datetime
    started_at: datetime
    finished_at: datetime
    outcome: str
    exit_status: str
    scanned: int
    urgent: int
    overdue: int
    notified: int
    skipped: int
    failed: int
    failures: list[DispatchFailureResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: JobRunSummary) -> JobRunResponse:
        return cls(
            run_id=summary.run_id,
            job_name=summary.job_name,
            as_of=summary.as_of,
            started_at=summary.started_at,
            finished_at=summary.finished_at,
            outcome=summary.outcome.value,
            exit_status=summary.exit_status,
            scanned=summary.scanned,
            urgent=summary.urgent,
            overdue=summary.overdue,
            notified=summary.notified,
            skipped=summary.skipped,
            failed=summary.failed,
            failures=[
                DispatchFailureResponse(recipient=f.recipient, reason=f.reason)
                for f in summary.failures
            ],
        )


class JobRunListResponse(BaseModel):
    """Most recent runs, newest first."""

    job_name: str
    runs: list[JobRunResponse]
    count: int
