"""Domain errors for ipdocket.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from IpDocketError.
"""

from ipdocket.domain.errors.matter import MatterNotFoundError
from ipdocket.domain.errors.notification import (
    DataLoadFailureError,
    DispatchFailureError,
    RecipientResolutionError,
)
from ipdocket.domain.errors.run_lock import RunLockHeldError
from ipdocket.domain.errors.task import InvalidTaskError, TaskCompletedError

__all__: list[str] = [
    "DataLoadFailureError",
    "DispatchFailureError",
    "InvalidTaskError",
    "MatterNotFoundError",
    "RecipientResolutionError",
    "RunLockHeldError",
    "TaskCompletedError",
]
