"""Daily scheduler for the urgent task notification job.

Fires ``tasks:send-urgent-notifications`` every day at the configured
local time (08:00 by default) and appends one line per run to the
scheduler output log (``logs/urgent-notifications.log``).

Overlap protection is the job's run-lock, not this loop: several workers
on several nodes may fire at the same time, and all but one skip.

Shutdown: SIGINT/SIGTERM call stop(), which wakes the sleeping loop and
asks an in-flight run to stop at the next batch boundary.
"""

from __future__ import annotations

import asyncio
import signal
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from structlog import get_logger

from ipdocket.domain.errors.notification import DataLoadFailureError

if TYPE_CHECKING:
    from ipdocket.application.ports.time_authority import TimeAuthorityProtocol
    from ipdocket.application.services.urgent_task_notification_job import (
        UrgentTaskNotificationJob,
    )
    from ipdocket.config.notification_config import NotificationJobConfig
    from ipdocket.domain.models.job_run import JobRunSummary

logger = get_logger(__name__)


def next_run_at(after: datetime, hour: int, minute: int) -> datetime:
    """Return the first HH:MM strictly after ``after``, in its time zone.

    With a zone that has DST rules (zoneinfo) the result keeps the wall
    clock time, so the run stays at 08:00 local across DST changes.

    Args:
        after: Timezone-aware reference time.
        hour: Scheduled hour (0-23).
        minute: Scheduled minute (0-59).
    """
    candidate = after.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= after:
        candidate += timedelta(days=1)
    return candidate


def seconds_until(target: datetime, now: datetime) -> float:
    """Elapsed seconds from ``now`` to ``target``.

    Computed in UTC: subtracting datetimes that share a tzinfo compares wall
    clock times, which is an hour off across a DST change.
    """
    elapsed = target.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return elapsed.total_seconds()


def format_output_line(summary: JobRunSummary) -> str:
    """One scheduler output log line for a run."""
    return (
        f"[{summary.finished_at.isoformat()}] {summary.job_name} "
        f"run_id={summary.run_id} status={summary.exit_status!r} "
        f"scanned={summary.scanned} urgent={summary.urgent} "
        f"overdue={summary.overdue} notified={summary.notified} "
        f"skipped={summary.skipped} failed={summary.failed}"
    )


class UrgentNotificationWorker:
    """Long-running daily trigger of the urgent task notification job."""

    def __init__(
        self,
        job: UrgentTaskNotificationJob,
        time_authority: TimeAuthorityProtocol,
        config: NotificationJobConfig,
    ) -> None:
        self._job = job
        self._time = time_authority
        self._config = config
        self._output_log = Path(config.output_log_path)
        self._stop_event = asyncio.Event()
        self._cancel_event = asyncio.Event()
        self._runs = 0

    @property
    def runs(self) -> int:
        """Number of runs triggered so far."""
        return self._runs

    @property
    def is_stopping(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request shutdown: stop sleeping and cancel an in-flight run."""
        logger.info("urgent_notification_worker_stop_requested")
        self._stop_event.set()
        self._cancel_event.set()

    async def run(self) -> None:
        """Run until stop() is called."""
        fired_at = self._time.now()
        logger.info(
            "urgent_notification_worker_started",
            schedule_time=self._config.schedule_time,
            output_log=str(self._output_log),
        )
        while not self._stop_event.is_set():
            reference = max(self._time.now(), fired_at)
            scheduled = next_run_at(
                reference, self._config.schedule_hour, self._config.schedule_minute
            )
            delay = seconds_until(scheduled, self._time.now())
            logger.info(
                "urgent_notifications_next_run",
                scheduled_for=scheduled.isoformat(),
                delay_seconds=round(delay, 1),
            )
            if await self._sleep(delay):
                break
            fired_at = scheduled
            await self.run_once(as_of=None)
        logger.info("urgent_notification_worker_stopped", runs=self._runs)

    async def run_once(self, as_of: datetime | None = None) -> JobRunSummary | None:
        """Trigger one run and append its outcome to the output log.

        Returns:
            The run summary, or None if the run failed.
        """
        self._runs += 1
        try:
            summary = await self._job.run(as_of=as_of, cancel_event=self._cancel_event)
        except DataLoadFailureError as e:
            await self._append_output(
                f"[{self._time.now().isoformat()}] {self._job.job_name} "
                f"status='failed' reason={e.reason!r}"
            )
            return None
        except Exception:
            logger.exception("urgent_notifications_run_crashed")
            await self._append_output(
                f"[{self._time.now().isoformat()}] {self._job.job_name} status='crashed'"
            )
            return None

        await self._append_output(format_output_line(summary))
        return summary

    async def _sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True if woken by stop()."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, seconds))
        except asyncio.TimeoutError:
            return False
        return True

    async def _append_output(self, line: str) -> None:
        try:
            await asyncio.to_thread(self._write_line, line)
        except OSError as e:
            logger.error(
                "scheduler_output_log_write_failed",
                path=str(self._output_log),
                error=str(e),
            )

    def _write_line(self, line: str) -> None:
        self._output_log.parent.mkdir(parents=True, exist_ok=True)
        with self._output_log.open("a", encoding="utf-8") as f:
            f.write(line + "\n")


def install_signal_handlers(worker: UrgentNotificationWorker) -> None:
    """Route SIGINT/SIGTERM to worker.stop()."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)
