"""Bootstrap wiring for the notification pipeline.

Adapter selection:
- Notification records: PostgreSQL if DATABASE_URL is set, else in-memory.
- Run-lock: Redis if REDIS_URL is set, else lock files in the configured
  lock directory.
- Notification sink: webhook if NOTIFICATION_WEBHOOK_URL is set, else a
  recording stub (nothing is delivered).
- Run log: JSON-lines file at the configured path.
- Tasks, matters, actors: supplied by the host application through the
  set_* functions; in-memory stubs otherwise.
"""

from __future__ import annotations

import os

from structlog import get_logger

from ipdocket.application.ports.actor_repository import ActorRepositoryProtocol
from ipdocket.application.ports.matter_repository import MatterRepositoryProtocol
from ipdocket.application.ports.notification_record_repository import (
    NotificationRecordRepositoryProtocol,
)
from ipdocket.application.ports.notification_sink import NotificationSinkProtocol
from ipdocket.application.ports.run_lock import RunLockProtocol
from ipdocket.application.ports.run_log import RunLogProtocol
from ipdocket.application.ports.task_repository import TaskRepositoryProtocol
from ipdocket.application.ports.time_authority import TimeAuthorityProtocol
from ipdocket.application.services.matter_status_service import MatterStatusService
from ipdocket.application.services.renewal_cancellation_service import (
    RenewalCancellationService,
)
from ipdocket.application.services.status_transition_notifier import (
    StatusTransitionNotifier,
)
from ipdocket.application.services.urgent_task_notification_job import (
    UrgentTaskNotificationJob,
)
from ipdocket.config.notification_config import (
    NotificationJobConfig,
    StatusNotificationConfig,
)
from ipdocket.infrastructure.adapters.locks.file_run_lock import FileRunLock
from ipdocket.infrastructure.adapters.run_log.json_lines_run_log import (
    JsonLinesRunLog,
)
from ipdocket.infrastructure.adapters.time.system_time_authority import (
    SystemTimeAuthority,
)
from ipdocket.infrastructure.stubs.actor_repository_stub import ActorRepositoryStub
from ipdocket.infrastructure.stubs.matter_repository_stub import MatterRepositoryStub
from ipdocket.infrastructure.stubs.notification_record_repository_stub import (
    NotificationRecordRepositoryStub,
)
from ipdocket.infrastructure.stubs.notification_sink_stub import (
    RecordingNotificationSinkStub,
)
from ipdocket.infrastructure.stubs.task_repository_stub import TaskRepositoryStub

logger = get_logger()

_job_config: NotificationJobConfig | None = None
_status_config: StatusNotificationConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_task_repository: TaskRepositoryProtocol | None = None
_matter_repository: MatterRepositoryProtocol | None = None
_actor_repository: ActorRepositoryProtocol | None = None
_record_repository: NotificationRecordRepositoryProtocol | None = None
_notification_sink: NotificationSinkProtocol | None = None
_run_lock: RunLockProtocol | None = None
_run_log: RunLogProtocol | None = None


def get_notification_job_config() -> NotificationJobConfig:
    """Get urgent notification job configuration."""
    global _job_config
    if _job_config is None:
        _job_config = NotificationJobConfig.from_environment()
    return _job_config


def get_status_notification_config() -> StatusNotificationConfig:
    """Get status notification configuration."""
    global _status_config
    if _status_config is None:
        _status_config = StatusNotificationConfig.from_environment()
    return _status_config


def get_time_authority() -> TimeAuthorityProtocol:
    """Get time authority instance."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_task_repository() -> TaskRepositoryProtocol:
    """Get task repository instance (host-provided or in-memory stub)."""
    global _task_repository
    if _task_repository is None:
        logger.warning(
            "task_repository_initialized",
            repository_type="InMemoryStub",
            message="No task repository configured - using empty in-memory stub",
        )
        _task_repository = TaskRepositoryStub()
    return _task_repository


def get_matter_repository() -> MatterRepositoryProtocol:
    """Get matter repository instance (host-provided or in-memory stub)."""
    global _matter_repository
    if _matter_repository is None:
        logger.warning(
            "matter_repository_initialized",
            repository_type="InMemoryStub",
            message="No matter repository configured - using empty in-memory stub",
        )
        _matter_repository = MatterRepositoryStub()
    return _matter_repository


def get_actor_repository() -> ActorRepositoryProtocol:
    """Get actor repository instance (host-provided or in-memory stub)."""
    global _actor_repository
    if _actor_repository is None:
        logger.warning(
            "actor_repository_initialized",
            repository_type="InMemoryStub",
            message="No actor repository configured - using empty in-memory stub",
        )
        _actor_repository = ActorRepositoryStub()
    return _actor_repository


def get_notification_record_repository() -> NotificationRecordRepositoryProtocol:
    """Get notification record repository instance.

    Returns the PostgreSQL repository if DATABASE_URL is configured,
    otherwise falls back to the in-memory stub.
    """
    global _record_repository
    if _record_repository is None:
        if os.environ.get("DATABASE_URL"):
            try:
                from ipdocket.bootstrap.database import get_session_factory
                from ipdocket.infrastructure.adapters.persistence.notification_record_repository import (
                    PostgresNotificationRecordRepository,
                )

                _record_repository = PostgresNotificationRecordRepository(
                    session_factory=get_session_factory()
                )
                logger.info(
                    "notification_record_repository_initialized",
                    repository_type="PostgreSQL",
                )
            except Exception as e:
                logger.error(
                    "postgres_repository_init_failed",
                    error=str(e),
                    message="Falling back to in-memory stub",
                )
                _record_repository = NotificationRecordRepositoryStub()
        else:
            logger.warning(
                "notification_record_repository_initialized",
                repository_type="InMemoryStub",
                message="DATABASE_URL not set - dedup records will not persist",
            )
            _record_repository = NotificationRecordRepositoryStub()
    return _record_repository


def get_notification_sink() -> NotificationSinkProtocol:
    """Get notification sink instance."""
    global _notification_sink
    if _notification_sink is None:
        url = os.environ.get("NOTIFICATION_WEBHOOK_URL")
        if url:
            from ipdocket.infrastructure.adapters.notification.webhook_sink import (
                WebhookNotificationSink,
            )

            _notification_sink = WebhookNotificationSink(
                url=url,
                timeout_seconds=get_notification_job_config().io_timeout_seconds,
                secret=os.environ.get("NOTIFICATION_WEBHOOK_SECRET") or None,
            )
            logger.info("notification_sink_initialized", sink_type="Webhook")
        else:
            logger.warning(
                "notification_sink_initialized",
                sink_type="RecordingStub",
                message="NOTIFICATION_WEBHOOK_URL not set - notifications are not delivered",
            )
            _notification_sink = RecordingNotificationSinkStub()
    return _notification_sink


def get_run_lock() -> RunLockProtocol:
    """Get run-lock instance (Redis if REDIS_URL is set, else lock files)."""
    global _run_lock
    if _run_lock is None:
        redis_url = os.environ.get("REDIS_URL")
        if redis_url:
            import redis.asyncio as aioredis

            from ipdocket.infrastructure.adapters.locks.redis_run_lock import (
                RedisRunLock,
            )

            _run_lock = RedisRunLock(aioredis.from_url(redis_url))
            logger.info("run_lock_initialized", lock_type="Redis")
        else:
            lock_dir = get_notification_job_config().lock_dir
            _run_lock = FileRunLock(lock_dir)
            logger.info("run_lock_initialized", lock_type="File", lock_dir=lock_dir)
    return _run_lock


def get_run_log() -> RunLogProtocol:
    """Get run log instance."""
    global _run_log
    if _run_log is None:
        _run_log = JsonLinesRunLog(get_notification_job_config().run_log_path)
    return _run_log


def get_urgent_task_notification_job() -> UrgentTaskNotificationJob:
    """Build the urgent task notification job from the wired dependencies."""
    return UrgentTaskNotificationJob(
        task_repo=get_task_repository(),
        matter_repo=get_matter_repository(),
        actor_repo=get_actor_repository(),
        record_repo=get_notification_record_repository(),
        sink=get_notification_sink(),
        run_lock=get_run_lock(),
        run_log=get_run_log(),
        time_authority=get_time_authority(),
        config=get_notification_job_config(),
    )


def get_status_transition_notifier() -> StatusTransitionNotifier:
    """Build the status transition notifier from the wired dependencies."""
    return StatusTransitionNotifier(
        actor_repo=get_actor_repository(),
        record_repo=get_notification_record_repository(),
        sink=get_notification_sink(),
        time_authority=get_time_authority(),
        config=get_status_notification_config(),
    )


def get_matter_status_service() -> MatterStatusService:
    """Build the status write path from the wired dependencies."""
    status_config = get_status_notification_config()
    return MatterStatusService(
        matter_repo=get_matter_repository(),
        notifier=get_status_transition_notifier(),
        renewal_cancellation=RenewalCancellationService(
            task_repo=get_task_repository(),
            time_authority=get_time_authority(),
            io_timeout_seconds=status_config.io_timeout_seconds,
        ),
        time_authority=get_time_authority(),
    )


def set_notification_job_config(config: NotificationJobConfig) -> None:
    """Set job configuration (for testing or explicit wiring)."""
    global _job_config
    _job_config = config


def set_status_notification_config(config: StatusNotificationConfig) -> None:
    """Set status notification configuration."""
    global _status_config
    _status_config = config


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set time authority (for testing)."""
    global _time_authority
    _time_authority = time_authority


def set_docket_repositories(
    tasks: TaskRepositoryProtocol,
    matters: MatterRepositoryProtocol,
    actors: ActorRepositoryProtocol,
) -> None:
    """Set the host application's task, matter and actor repositories."""
    global _task_repository, _matter_repository, _actor_repository
    _task_repository = tasks
    _matter_repository = matters
    _actor_repository = actors


def set_notification_record_repository(
    repository: NotificationRecordRepositoryProtocol,
) -> None:
    """Set notification record repository (for testing)."""
    global _record_repository
    _record_repository = repository


def set_notification_sink(sink: NotificationSinkProtocol) -> None:
    """Set notification sink (for testing)."""
    global _notification_sink
    _notification_sink = sink


def set_run_lock(run_lock: RunLockProtocol) -> None:
    """Set run-lock (for testing)."""
    global _run_lock
    _run_lock = run_lock


def set_run_log(run_log: RunLogProtocol) -> None:
    """Set run log (for testing)."""
    global _run_log
    _run_log = run_log


def reset_urgent_notifications_bootstrap() -> None:
    """Reset all singletons (for testing)."""
    global _job_config, _status_config, _time_authority
    global _task_repository, _matter_repository, _actor_repository
    global _record_repository, _notification_sink, _run_lock, _run_log
    _job_config = None
    _status_config = None
    _time_authority = None
    _task_repository = None
    _matter_repository = None
    _actor_repository = None
    _record_repository = None
    _notification_sink = None
    _run_lock = None
    _run_log = None


async def prepare_notification_storage() -> None:
    """Create the notification records table when PostgreSQL is in use."""
    from ipdocket.infrastructure.adapters.persistence.notification_record_repository import (
        PostgresNotificationRecordRepository,
    )

    repository = get_notification_record_repository()
    if isinstance(repository, PostgresNotificationRecordRepository):
        await repository.ensure_schema()
        logger.info("notification_record_schema_ready")


async def shutdown_notification_storage() -> None:
    """Dispose the record store's database engine, if one was created."""
    from ipdocket.bootstrap.database import close_database_engine

    await close_database_engine()
