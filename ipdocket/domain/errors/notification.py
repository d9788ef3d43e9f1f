"""Notification pipeline errors.

Propagation policy:
- RecipientResolutionError: logged and dropped, never retried.
- DispatchFailureError: isolated to one recipient, retried on the next
  scheduled run only.
- DataLoadFailureError: fatal for the current run, surfaced to the operator.
"""

from __future__ import annotations

from ipdocket.domain.exceptions import IpDocketError


class RecipientResolutionError(IpDocketError):
    """Raised when no deliverable recipient can be resolved.

    Attributes:
        subject_id: Matter or task the notification was about.
        reason: Why resolution failed.
    """

    def __init__(self, subject_id: str, reason: str) -> None:
        super().__init__(f"Cannot resolve recipient for {subject_id}: {reason}")
        self.subject_id = subject_id
        self.reason = reason


class DispatchFailureError(IpDocketError):
    """Raised when the notification sink rejects or fails a delivery.

    Attributes:
        recipient_id: Actor ID or address of the intended recipient.
        reason: Failure reason reported by the sink.
    """

    def __init__(self, recipient_id: str, reason: str) -> None:
        super().__init__(f"Dispatch to {recipient_id} failed: {reason}")
        self.recipient_id = recipient_id
        self.reason = reason


class DataLoadFailureError(IpDocketError):
    """Raised when the task scan cannot be loaded.

    Attributes:
        job_name: Name of the job whose run failed.
        reason: Underlying error description.
    """

    def __init__(self, job_name: str, reason: str) -> None:
        super().__init__(f"{job_name}: data load failed: {reason}")
        self.job_name = job_name
        self.reason = reason
