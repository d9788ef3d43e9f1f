"""Application ports (interfaces) for ipdocket.

Services depend on these protocols only; implementations live in
ipdocket.infrastructure (stubs for tests and development, adapters for
production) and are wired in ipdocket.bootstrap.
"""

from ipdocket.application.ports.actor_repository import ActorRepositoryProtocol
from ipdocket.application.ports.matter_repository import MatterRepositoryProtocol
from ipdocket.application.ports.notification_record_repository import (
    NotificationRecordRepositoryProtocol,
)
from ipdocket.application.ports.notification_sink import (
    DispatchResult,
    NotificationSinkProtocol,
)
from ipdocket.application.ports.run_lock import RunLockProtocol
from ipdocket.application.ports.run_log import RunLogProtocol
from ipdocket.application.ports.task_repository import TaskRepositoryProtocol
from ipdocket.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "ActorRepositoryProtocol",
    "DispatchResult",
    "MatterRepositoryProtocol",
    "NotificationRecordRepositoryProtocol",
    "NotificationSinkProtocol",
    "RunLockProtocol",
    "RunLogProtocol",
    "TaskRepositoryProtocol",
    "TimeAuthorityProtocol",
]
