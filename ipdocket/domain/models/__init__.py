"""Domain models for ipdocket."""

from ipdocket.domain.models.actor import Actor
from ipdocket.domain.models.job_run import (
    DispatchFailureEntry,
    JobRunOutcome,
    JobRunSummary,
)
from ipdocket.domain.models.matter import Matter, MatterStatus
from ipdocket.domain.models.notification_record import (
    NotificationKind,
    NotificationRecord,
)
from ipdocket.domain.models.task import RENEWAL_TASK_CODE, Task
from ipdocket.domain.models.urgency import UrgencyTier

__all__: list[str] = [
    "Actor",
    "DispatchFailureEntry",
    "JobRunOutcome",
    "JobRunSummary",
    "Matter",
    "MatterStatus",
    "NotificationKind",
    "NotificationRecord",
    "RENEWAL_TASK_CODE",
    "Task",
    "UrgencyTier",
]
