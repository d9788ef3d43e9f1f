"""Application services - Use case orchestration.

Available services:
- UrgentTaskNotificationJob: Daily urgent/overdue task notifications
- StatusTransitionNotifier: Notifications on matter status transitions
- RenewalCancellationService: Auto-completes renewals of terminated matters
- MatterStatusService: Status write path (save, then side effects)
- hold_run_lock: Overlap guard for scheduled jobs
"""

from ipdocket.application.services.matter_status_service import (
    MatterStatusService,
    StatusChangeOutcome,
)
from ipdocket.application.services.renewal_cancellation_service import (
    AUTO_CANCEL_NOTE_TEMPLATE,
    RenewalCancellationService,
)
from ipdocket.application.services.run_lock_guard import hold_run_lock
from ipdocket.application.services.status_transition_notifier import (
    StatusTransitionNotifier,
)
from ipdocket.application.services.urgent_task_notification_job import (
    UrgentTaskNotificationJob,
)

__all__ = [
    "AUTO_CANCEL_NOTE_TEMPLATE",
    "MatterStatusService",
    "RenewalCancellationService",
    "StatusChangeOutcome",
    "StatusTransitionNotifier",
    "UrgentTaskNotificationJob",
    "hold_run_lock",
]
