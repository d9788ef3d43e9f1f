"""Infrastructure stubs for development and testing.

Available stubs:
- RunLockStub: Configurable run-lock (modes: default, acquire-fails, release-fails)
- TaskRepositoryStub / MatterRepositoryStub / ActorRepositoryStub: In-memory data
- NotificationRecordRepositoryStub: In-memory dedup records with atomic claims
- RunLogStub: In-memory run log
- RecordingNotificationSinkStub: Records notifications, injectable failures

WARNING: These stubs are NOT for production use.
Production implementations are in ipdocket/infrastructure/adapters/.
"""

from ipdocket.infrastructure.stubs.actor_repository_stub import ActorRepositoryStub
from ipdocket.infrastructure.stubs.matter_repository_stub import MatterRepositoryStub
from ipdocket.infrastructure.stubs.notification_record_repository_stub import (
    NotificationRecordRepositoryStub,
)
from ipdocket.infrastructure.stubs.notification_sink_stub import (
    RecordingNotificationSinkStub,
    SentNotification,
)
from ipdocket.infrastructure.stubs.run_lock_stub import (
    RunLockMode,
    RunLockStub,
    RunLockStubConfig,
)
from ipdocket.infrastructure.stubs.run_log_stub import RunLogStub
from ipdocket.infrastructure.stubs.task_repository_stub import TaskRepositoryStub

__all__: list[str] = [
    "ActorRepositoryStub",
    "MatterRepositoryStub",
    "NotificationRecordRepositoryStub",
    "RecordingNotificationSinkStub",
    "RunLockMode",
    "RunLockStub",
    "RunLockStubConfig",
    "RunLogStub",
    "SentNotification",
    "TaskRepositoryStub",
]
