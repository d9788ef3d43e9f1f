#!/usr/bin/env python3
"""Run the urgent task notification job (tasks:send-urgent-notifications).

Without --loop the job runs once and the process exits with:
    0  completed, or skipped because another run holds the lock
    1  completed with failures, or cancelled
    2  failed (data could not be loaded)

With --loop the process stays up and fires the job daily at
URGENT_NOTIFICATIONS_SCHEDULE (08:00 local time by default).

Usage:
    python scripts/run_urgent_notifications.py
    python scripts/run_urgent_notifications.py --as-of 2026-03-02T08:00:00+01:00 -v
    python scripts/run_urgent_notifications.py --loop
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from ipdocket.bootstrap.logging import configure_structlog  # noqa: E402
from ipdocket.bootstrap.urgent_notifications import (  # noqa: E402
    get_notification_job_config,
    get_time_authority,
    get_urgent_task_notification_job,
    prepare_notification_storage,
    shutdown_notification_storage,
)
from ipdocket.domain.errors.notification import DataLoadFailureError  # noqa: E402
from ipdocket.domain.models.job_run import JobRunOutcome  # noqa: E402
from ipdocket.workers.urgent_notification_worker import (  # noqa: E402
    UrgentNotificationWorker,
    format_output_line,
    install_signal_handlers,
)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FAILED = 2


def parse_as_of(value: str) -> datetime:
    """Parse --as-of; naive values are taken as local server time."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid ISO 8601 datetime: {value!r}"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def exit_code_for(outcome: JobRunOutcome) -> int:
    if outcome in (JobRunOutcome.COMPLETED, JobRunOutcome.SKIPPED):
        return EXIT_OK
    if outcome is JobRunOutcome.FAILED:
        return EXIT_FAILED
    return EXIT_PARTIAL


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send notifications for urgent and overdue tasks"
    )
    parser.add_argument(
        "--as-of",
        type=parse_as_of,
        default=None,
        help="Reference time (ISO 8601); defaults to now",
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Stay up and run daily at the configured schedule time",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_structlog(
        environment="development" if args.verbose else None,
        level="DEBUG" if args.verbose else None,
    )

    job = get_urgent_task_notification_job()
    await prepare_notification_storage()
    try:
        if args.loop:
            worker = UrgentNotificationWorker(
                job=job,
                time_authority=get_time_authority(),
                config=get_notification_job_config(),
            )
            install_signal_handlers(worker)
            await worker.run()
            return EXIT_OK

        try:
            summary = await job.run(as_of=args.as_of)
        except DataLoadFailureError as e:
            print(f"{job.job_name}: failed: {e.reason}", file=sys.stderr)
            return EXIT_FAILED
    finally:
        await shutdown_notification_storage()

    print(format_output_line(summary))
    return exit_code_for(summary.outcome)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
