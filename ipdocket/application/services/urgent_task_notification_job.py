"""Urgent task notification job.

Scheduled daily (08:00 local server time) as
``tasks:send-urgent-notifications``. One run:

1. Takes the run-lock keyed by the job name; if held, exits as SKIPPED
   with no side effects.
2. Loads incomplete tasks due within the urgent window (overdue tasks
   without a lower bound) plus their matters. Any load error is fatal.
3. Drops tasks of dead matters and renewal tasks, classifies the rest in
   due date order and keeps URGENT and OVERDUE ones.
4. Drops tasks already notified today.
5. Groups tasks by the matter's responsible actor and sends one batch per
   recipient. A failed batch is logged and counted; the others go on.
6. Optionally sends the daily system summary.
7. Appends a run summary to the run log.

The lock is released on every exit path. Cancellation is cooperative and
only honoured between batches, so a batch is never half sent and half
recorded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

from ipdocket.application.dtos.notification import ClassifiedTask, UrgentTaskBatch
from ipdocket.application.ports.notification_sink import (
    TEMPLATE_TASKS_SUMMARY,
    TEMPLATE_URGENT_TASKS,
)
from ipdocket.application.services.run_lock_guard import hold_run_lock
from ipdocket.config.notification_config import (
    DEFAULT_NOTIFICATION_JOB_CONFIG,
    NotificationJobConfig,
)
from ipdocket.domain.errors.notification import (
    DataLoadFailureError,
    DispatchFailureError,
    RecipientResolutionError,
)
from ipdocket.domain.errors.run_lock import RunLockHeldError
from ipdocket.domain.errors.task import InvalidTaskError
from ipdocket.domain.models.actor import Actor
from ipdocket.domain.models.job_run import (
    DispatchFailureEntry,
    JobRunOutcome,
    JobRunSummary,
)
from ipdocket.domain.models.notification_record import (
    SYSTEM_SUBJECT_ID,
    NotificationKind,
    NotificationRecord,
)
from ipdocket.domain.models.urgency import UrgencyTier
from ipdocket.domain.services.deadline_classifier import classify
from ipdocket.domain.services.language import detect_language, validate_language
from ipdocket.domain.services.notification_text import (
    tasks_summary_subject,
    urgent_tasks_subject,
)

if TYPE_CHECKING:
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
    from ipdocket.domain.models.matter import Matter
    from ipdocket.domain.models.task import Task

logger = structlog.get_logger(__name__)


@dataclass
class _RunCounters:
    """Mutable tallies of one run, frozen into a JobRunSummary at the end."""

    scanned: int = 0
    urgent: int = 0
    overdue: int = 0
    notified: int = 0
    skipped: int = 0
    failures: list[DispatchFailureEntry] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


class UrgentTaskNotificationJob:
    """Daily urgent and overdue task notifications.

    Example:
        >>> job = UrgentTaskNotificationJob(
        ...     task_repo=task_repo,
        ...     matter_repo=matter_repo,
        ...     actor_repo=actor_repo,
        ...     record_repo=record_repo,
        ...     sink=sink,
        ...     run_lock=run_lock,
        ...     run_log=run_log,
        ...     time_authority=time_authority,
        ... )
        >>> summary = await job.run()
        >>> summary.exit_status
        'completed'
    """

    def __init__(
        self,
        task_repo: TaskRepositoryProtocol,
        matter_repo: MatterRepositoryProtocol,
        actor_repo: ActorRepositoryProtocol,
        record_repo: NotificationRecordRepositoryProtocol,
        sink: NotificationSinkProtocol,
        run_lock: RunLockProtocol,
        run_log: RunLogProtocol,
        time_authority: TimeAuthorityProtocol,
        config: NotificationJobConfig | None = None,
    ) -> None:
        """Initialize the job.

        Args:
            task_repo: Source of open tasks.
            matter_repo: Resolves task -> matter references.
            actor_repo: Resolves responsible actors.
            record_repo: Dedup records.
            sink: Notification delivery.
            run_lock: Overlap guard.
            run_log: Durable run summaries.
            time_authority: Source of the current time.
            config: Job configuration. Defaults apply if omitted.
        """
        self._task_repo = task_repo
        self._matter_repo = matter_repo
        self._actor_repo = actor_repo
        self._record_repo = record_repo
        self._sink = sink
        self._run_lock = run_lock
        self._run_log = run_log
        self._time = time_authority
        self._config = config or DEFAULT_NOTIFICATION_JOB_CONFIG

    @property
    def job_name(self) -> str:
        return self._config.job_name

    async def run(
        self,
        as_of: datetime | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> JobRunSummary:
        """Run the job once.

        Args:
            as_of: Reference time for classification (defaults to now).
            cancel_event: When set, the run stops before the next batch.

        Returns:
            JobRunSummary of the run (SKIPPED if the lock was held).

        Raises:
            DataLoadFailureError: If the task scan could not be loaded. The
                run is recorded as FAILED and the lock is released.
            ValueError: If as_of is timezone-naive.
        """
        as_of = as_of or self._time.now()
        if as_of.tzinfo is None:
            raise ValueError("as_of must be timezone-aware")

        run_id = str(uuid4())
        started_at = self._time.now()
        log = logger.bind(
            job_name=self.job_name,
            run_id=run_id,
            as_of=as_of.isoformat(),
        )

        with structlog.contextvars.bound_contextvars(correlation_id=run_id):
            try:
                async with hold_run_lock(
                    self._run_lock, self.job_name, self._config.lock_ttl_seconds
                ):
                    log.info("urgent_notifications_started")
                    return await self._run_locked(
                        run_id, as_of, started_at, cancel_event, log
                    )
            except RunLockHeldError:
                log.info("urgent_notifications_skipped", reason="run_lock_held")
                return JobRunSummary(
                    run_id=run_id,
                    job_name=self.job_name,
                    as_of=as_of,
                    started_at=started_at,
                    finished_at=self._time.now(),
                    outcome=JobRunOutcome.SKIPPED,
                )

    async def _run_locked(
        self,
        run_id: str,
        as_of: datetime,
        started_at: datetime,
        cancel_event: asyncio.Event | None,
        log: Any,
    ) -> JobRunSummary:
        counters = _RunCounters()
        day = as_of.date()

        try:
            tasks, matters = await self._load(as_of)
            counters.scanned = len(tasks)
            classified = self._classify(tasks, matters, as_of, counters, log)
            pending = await self._drop_already_notified(classified, day, counters)
        except DataLoadFailureError as e:
            log.error("urgent_notifications_data_load_failed", reason=e.reason)
            summary = self._summarize(
                run_id, as_of, started_at, JobRunOutcome.FAILED, counters
            )
            await self._append_run_log(summary, log)
            raise

        actors: dict[str, Actor | None] = {}
        batches = await self._group_by_recipient(pending, matters, actors, counters, log)

        cancelled = False
        for index, batch in enumerate(batches):
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                log.warning(
                    "urgent_notifications_cancelled",
                    remaining_batches=len(batches) - index,
                )
                break
            await self._dispatch_batch(batch, day, counters, log)

        summary_email = self._config.summary_recipient_email
        if not cancelled and summary_email:
            await self._send_summary(
                summary_email, classified, matters, actors, day, counters, log
            )

        if cancelled:
            outcome = JobRunOutcome.CANCELLED
        elif counters.failed:
            outcome = JobRunOutcome.COMPLETED_WITH_FAILURES
        else:
            outcome = JobRunOutcome.COMPLETED

        summary = self._summarize(run_id, as_of, started_at, outcome, counters)
        await self._append_run_log(summary, log)
        log.info(
            "urgent_notifications_finished",
            exit_status=summary.exit_status,
            scanned=summary.scanned,
            urgent=summary.urgent,
            overdue=summary.overdue,
            notified=summary.notified,
            skipped=summary.skipped,
            failed=summary.failed,
        )
        return summary

    async def _load(self, as_of: datetime) -> tuple[list[Task], dict[str, Matter]]:
        """Load open tasks in the window and their matters.

        Raises:
            DataLoadFailureError: On any repository error or timeout.
        """
        cutoff = as_of + self._config.urgent_window
        timeout = self._config.io_timeout_seconds
        try:
            tasks = await asyncio.wait_for(
                self._task_repo.list_open_tasks_due_before(cutoff), timeout=timeout
            )
            matters = await asyncio.wait_for(
                self._matter_repo.get_many({t.matter_id for t in tasks}),
                timeout=timeout,
            )
        except Exception as e:
            raise DataLoadFailureError(self.job_name, _describe(e)) from e
        return tasks, matters

    def _classify(
        self,
        tasks: list[Task],
        matters: dict[str, Matter],
        as_of: datetime,
        counters: _RunCounters,
        log: Any,
    ) -> list[ClassifiedTask]:
        """Filter and classify tasks in stable (due date, task ID) order."""
        classified: list[ClassifiedTask] = []
        for task in sorted(tasks, key=_processing_order):
            task_log = log.bind(task_id=task.task_id, matter_id=task.matter_id)
            matter = matters.get(task.matter_id)

            if task.done:
                counters.skipped += 1
                continue
            if matter is None:
                counters.skipped += 1
                task_log.warning("task_matter_not_found")
                continue
            if matter.dead or task.is_renewal:
                counters.skipped += 1
                continue

            try:
                tier = classify(task, as_of, self._config.urgent_window)
            except InvalidTaskError as e:
                counters.skipped += 1
                task_log.warning("task_classification_failed", reason=e.reason)
                continue

            if not tier.needs_notification:
                counters.skipped += 1
                continue
            if tier is UrgencyTier.OVERDUE:
                counters.overdue += 1
            else:
                counters.urgent += 1
            classified.append(ClassifiedTask(task=task, tier=tier, matter_uid=matter.uid))
        return classified

    async def _drop_already_notified(
        self,
        classified: list[ClassifiedTask],
        day: date,
        counters: _RunCounters,
    ) -> list[ClassifiedTask]:
        """Remove tasks that already have a record for ``day``.

        Raises:
            DataLoadFailureError: If the record store cannot be read.
        """
        pending: list[ClassifiedTask] = []
        try:
            for item in classified:
                seen = await asyncio.wait_for(
                    self._record_repo.exists(
                        item.task.task_id, NotificationKind.URGENT_TASK, day
                    ),
                    timeout=self._config.io_timeout_seconds,
                )
                if seen:
                    counters.skipped += 1
                else:
                    pending.append(item)
        except Exception as e:
            raise DataLoadFailureError(self.job_name, _describe(e)) from e
        return pending

    async def _group_by_recipient(
        self,
        pending: list[ClassifiedTask],
        matters: dict[str, Matter],
        actors: dict[str, Actor | None],
        counters: _RunCounters,
        log: Any,
    ) -> list[UrgentTaskBatch]:
        """Group tasks into one batch per recipient, keeping due date order."""
        batches: dict[str, UrgentTaskBatch] = {}
        for item in pending:
            matter = matters[item.task.matter_id]
            try:
                recipient = await self._resolve_recipient(matter, actors)
            except RecipientResolutionError as e:
                counters.skipped += 1
                log.warning(
                    "task_recipient_unresolved",
                    task_id=item.task.task_id,
                    matter_id=matter.matter_id,
                    reason=e.reason,
                )
                continue
            batch = batches.setdefault(
                recipient.actor_id, UrgentTaskBatch(recipient=recipient)
            )
            batch.tasks.append(item)

        log.info(
            "urgent_tasks_grouped",
            recipient_count=len(batches),
            task_count=sum(len(b.tasks) for b in batches.values()),
        )
        return list(batches.values())

    async def _resolve_recipient(
        self, matter: Matter, actors: dict[str, Actor | None]
    ) -> Actor:
        """Resolve the responsible actor of a matter, or the fallback.

        Raises:
            RecipientResolutionError: If neither is deliverable.
        """
        reason = "no responsible actor set"
        if matter.responsible_id:
            actor = await self._get_actor(matter.responsible_id, actors)
            if actor is not None and actor.is_reachable:
                return actor
            reason = (
                f"responsible {matter.responsible_id} not found"
                if actor is None
                else f"responsible {matter.responsible_id} has no email address"
            )

        fallback = self._config.fallback_recipient_email
        if fallback:
            return Actor(
                actor_id=fallback,
                name="Docketing",
                email=fallback,
                language=self._config.default_language,
            )
        raise RecipientResolutionError(matter.matter_id, reason)

    async def _get_actor(
        self, actor_id: str, actors: dict[str, Actor | None]
    ) -> Actor | None:
        if actor_id not in actors:
            try:
                actors[actor_id] = await asyncio.wait_for(
                    self._actor_repo.get(actor_id),
                    timeout=self._config.io_timeout_seconds,
                )
            except Exception as e:
                raise RecipientResolutionError(
                    actor_id, f"actor lookup failed: {_describe(e)}"
                ) from e
        return actors[actor_id]

    async def _dispatch_batch(
        self,
        batch: UrgentTaskBatch,
        day: date,
        counters: _RunCounters,
        log: Any,
    ) -> None:
        """Send one recipient's batch and record it.

        Failures are isolated: logged, counted, never raised.
        """
        recipient = batch.recipient
        language = validate_language(recipient.language, self._config.default_language)
        payload: dict[str, Any] = {
            "recipient_id": recipient.actor_id,
            "recipient_name": recipient.name,
            "overdue": [t.to_payload() for t in batch.overdue],
            "due_soon": [t.to_payload() for t in batch.due_soon],
            "total": len(batch.tasks),
            "language": language,
            "subject": urgent_tasks_subject(len(batch.tasks), language),
        }

        try:
            await self._send(recipient, TEMPLATE_URGENT_TASKS, payload)
        except DispatchFailureError as e:
            counters.failures.append(
                DispatchFailureEntry(recipient=recipient.actor_id, reason=e.reason)
            )
            log.error(
                "urgent_batch_dispatch_failed",
                recipient_id=recipient.actor_id,
                task_count=len(batch.tasks),
                reason=e.reason,
            )
            return

        sent_at = self._time.now()
        for item in batch.tasks:
            record = NotificationRecord(
                subject_id=item.task.task_id,
                kind=NotificationKind.URGENT_TASK,
                day=day,
                sent_at=sent_at,
            )
            try:
                await asyncio.wait_for(
                    self._record_repo.upsert(record),
                    timeout=self._config.io_timeout_seconds,
                )
            except Exception as e:
                counters.failures.append(
                    DispatchFailureEntry(
                        recipient=recipient.actor_id,
                        reason=(
                            f"record write failed for task {item.task.task_id}: "
                            f"{_describe(e)}"
                        ),
                    )
                )
                log.error(
                    "notification_record_write_failed",
                    task_id=item.task.task_id,
                    error=_describe(e),
                )

        counters.notified += len(batch.tasks)
        log.info(
            "urgent_batch_dispatched",
            recipient_id=recipient.actor_id,
            overdue_count=len(batch.overdue),
            due_soon_count=len(batch.due_soon),
            language=language,
        )

    async def _send_summary(
        self,
        email: str,
        classified: list[ClassifiedTask],
        matters: dict[str, Matter],
        actors: dict[str, Actor | None],
        day: date,
        counters: _RunCounters,
        log: Any,
    ) -> None:
        """Send the daily system summary to ``email``, at most once per day."""
        if not classified:
            log.info("tasks_summary_skipped", reason="no_urgent_tasks")
            return

        try:
            seen = await asyncio.wait_for(
                self._record_repo.exists(
                    SYSTEM_SUBJECT_ID, NotificationKind.TASKS_SUMMARY, day
                ),
                timeout=self._config.io_timeout_seconds,
            )
        except Exception as e:
            counters.failures.append(
                DispatchFailureEntry(recipient=email, reason=_describe(e))
            )
            log.error("tasks_summary_record_check_failed", error=_describe(e))
            return
        if seen:
            log.info("tasks_summary_skipped", reason="already_sent_today")
            return

        responsible = [
            actor
            for actor in (
                actors.get(matters[c.task.matter_id].responsible_id or "")
                for c in classified
            )
            if actor is not None
        ]
        language = detect_language(responsible, email, self._config.default_language)
        overdue = [c for c in classified if c.tier is UrgencyTier.OVERDUE]
        due_soon = [c for c in classified if c.tier is UrgencyTier.URGENT]
        recipient = Actor(actor_id=email, name="System", email=email, language=language)
        payload: dict[str, Any] = {
            "recipient_id": email,
            "overdue": [c.to_payload() for c in overdue],
            "due_soon": [c.to_payload() for c in due_soon],
            "total": len(classified),
            "language": language,
            "subject": tasks_summary_subject(len(classified), language),
        }

        try:
            await self._send(recipient, TEMPLATE_TASKS_SUMMARY, payload)
        except DispatchFailureError as e:
            counters.failures.append(DispatchFailureEntry(recipient=email, reason=e.reason))
            log.error("tasks_summary_dispatch_failed", recipient=email, reason=e.reason)
            return

        try:
            await asyncio.wait_for(
                self._record_repo.upsert(
                    NotificationRecord(
                        subject_id=SYSTEM_SUBJECT_ID,
                        kind=NotificationKind.TASKS_SUMMARY,
                        day=day,
                        sent_at=self._time.now(),
                    )
                ),
                timeout=self._config.io_timeout_seconds,
            )
        except Exception as e:
            counters.failures.append(
                DispatchFailureEntry(
                    recipient=email, reason=f"record write failed: {_describe(e)}"
                )
            )
            log.error(
                "notification_record_write_failed",
                subject_id=SYSTEM_SUBJECT_ID,
                error=_describe(e),
            )
        log.info(
            "tasks_summary_sent",
            recipient=email,
            task_count=len(classified),
            language=language,
        )

    async def _send(
        self, recipient: Actor, template_kind: str, payload: dict[str, Any]
    ) -> None:
        """Send through the sink with a timeout.

        Raises:
            DispatchFailureError: On a failed result, an exception or a timeout.
        """
        try:
            result = await asyncio.wait_for(
                self._sink.send(recipient, template_kind, payload),
                timeout=self._config.io_timeout_seconds,
            )
        except Exception as e:
            raise DispatchFailureError(recipient.actor_id, _describe(e)) from e
        if not result.success:
            raise DispatchFailureError(
                recipient.actor_id, result.error or "rejected by sink"
            )

    async def _append_run_log(self, summary: JobRunSummary, log: Any) -> None:
        try:
            await asyncio.wait_for(
                self._run_log.append(summary),
                timeout=self._config.io_timeout_seconds,
            )
        except Exception as e:
            log.error("run_log_append_failed", error=_describe(e))

    def _summarize(
        self,
        run_id: str,
        as_of: datetime,
        started_at: datetime,
        outcome: JobRunOutcome,
        counters: _RunCounters,
    ) -> JobRunSummary:
        return JobRunSummary(
            run_id=run_id,
            job_name=self.job_name,
            as_of=as_of,
            started_at=started_at,
            finished_at=self._time.now(),
            outcome=outcome,
            scanned=counters.scanned,
            urgent=counters.urgent,
            overdue=counters.overdue,
            notified=counters.notified,
            skipped=counters.skipped,
            failed=counters.failed,
            failures=tuple(counters.failures),
        )


def _processing_order(task: Task) -> tuple[bool, float, str]:
    # Tasks without a due date sort last; they are skipped as invalid anyway.
    due = task.due_date
    if due is None or due.tzinfo is None:
        return (True, 0.0, task.task_id)
    return (False, due.timestamp(), task.task_id)


def _describe(error: BaseException) -> str:
    """Non-empty description of an error (TimeoutError has no message)."""
    return str(error) or type(error).__name__
