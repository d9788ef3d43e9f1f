"""Run-lock errors for scheduled jobs.

A held lock is not a failure: it means a previous run of the same job is
still in progress and this invocation must exit without side effects.
"""

from __future__ import annotations

from ipdocket.domain.exceptions import IpDocketError


class RunLockHeldError(IpDocketError):
    """Raised when the run-lock for a job is already held.

    Attributes:
        lock_key: Key of the contended lock (the job name).
    """

    def __init__(self, lock_key: str) -> None:
        super().__init__(f"Run-lock already held: {lock_key}")
        self.lock_key = lock_key
