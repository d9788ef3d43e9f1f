"""Notification pipeline configuration.

This module defines configuration for the urgent task notification job and
the matter status change notifier, with environment variable overrides.

Environment Variables (Urgent task job):
- URGENT_NOTIFICATIONS_WINDOW_DAYS: Lookahead of the URGENT tier (default: 14)
- URGENT_NOTIFICATIONS_SCHEDULE: Daily run time, local HH:MM (default: 08:00)
- URGENT_NOTIFICATIONS_LOCK_TTL: Run-lock TTL in seconds (default: 3600)
- URGENT_NOTIFICATIONS_IO_TIMEOUT: Per-call I/O timeout in seconds (default: 30)
- URGENT_NOTIFICATIONS_FALLBACK_EMAIL: Recipient of unassigned tasks (default: unset)
- URGENT_NOTIFICATIONS_SUMMARY_EMAIL: Recipient of the daily summary (default: unset)
- URGENT_NOTIFICATIONS_LANGUAGE: Default notification language (default: en)
- URGENT_NOTIFICATIONS_OUTPUT_LOG: Scheduler output log (default: logs/urgent-notifications.log)
- URGENT_NOTIFICATIONS_RUN_LOG: JSON-lines run log (default: logs/urgent-notifications-runs.jsonl)
- URGENT_NOTIFICATIONS_LOCK_DIR: Directory of file run-locks (default: storage/locks)

Environment Variables (Status notifications):
- STATUS_NOTIFICATION_ROUTES: Comma separated ``Status:rule`` pairs, e.g.
  ``Granted:notify-client,Dead:notify-responsible,Filed:notify-none``
- STATUS_NOTIFICATION_IO_TIMEOUT: Per-call I/O timeout in seconds (default: 10)
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from ipdocket.domain.models.matter import MatterStatus
from ipdocket.domain.services.language import SUPPORTED_LANGUAGES

URGENT_NOTIFICATIONS_JOB_NAME: str = "tasks:send-urgent-notifications"

_SCHEDULE_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str_env(key: str, default: str | None = None) -> str | None:
    """Get string environment variable; blank counts as unset."""
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


class RecipientRule(Enum):
    """Who receives a status change notification."""

    NOTIFY_CLIENT = "notify-client"
    NOTIFY_RESPONSIBLE = "notify-responsible"
    NOTIFY_NONE = "notify-none"


def _default_routes() -> dict[MatterStatus, RecipientRule]:
    return {
        MatterStatus.GRANTED: RecipientRule.NOTIFY_CLIENT,
        MatterStatus.DEAD: RecipientRule.NOTIFY_RESPONSIBLE,
        MatterStatus.FILED: RecipientRule.NOTIFY_NONE,
    }


def parse_status_routes(text: str) -> dict[MatterStatus, RecipientRule]:
    """Parse a routing table from ``Status:rule`` pairs.

    Args:
        text: e.g. "Granted:notify-client, Dead:notify-responsible".

    Returns:
        Mapping of status to recipient rule.

    Raises:
        ValueError: On malformed pairs, unknown statuses or unknown rules.
    """
    routes: dict[MatterStatus, RecipientRule] = {}
    for pair in text.split(","):
        if not pair.strip():
            continue
        status_text, sep, rule_text = pair.partition(":")
        if not sep:
            raise ValueError(f"Malformed status route {pair!r}, expected Status:rule")
        status = MatterStatus.parse(status_text)
        try:
            rule = RecipientRule(rule_text.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown recipient rule {rule_text.strip()!r}") from None
        routes[status] = rule
    return routes


@dataclass(frozen=True)
class NotificationJobConfig:
    """Configuration for the urgent task notification job.

    Attributes:
        job_name: Scheduler command name, also the run-lock key.
        urgent_window_days: Lookahead of the URGENT tier, inclusive.
        schedule_time: Daily run time in local server time (HH:MM).
        lock_ttl_seconds: Run-lock lifetime; bounds how long a crashed run
            blocks later ticks.
        io_timeout_seconds: Timeout for every repository and sink call.
        fallback_recipient_email: Receives tasks whose matter has no
            responsible actor. Unset: such tasks are skipped.
        summary_recipient_email: Receives the daily summary. Unset: no summary.
        default_language: Language when none can be determined.
        output_log_path: File the scheduler appends run output to.
        run_log_path: JSON-lines run log.
        lock_dir: Directory for file-based run-locks.
    """

    job_name: str = URGENT_NOTIFICATIONS_JOB_NAME
    urgent_window_days: int = 14
    schedule_time: str = "08:00"
    lock_ttl_seconds: float = 3600.0
    io_timeout_seconds: float = 30.0
    fallback_recipient_email: str | None = None
    summary_recipient_email: str | None = None
    default_language: str = "en"
    output_log_path: str = "logs/urgent-notifications.log"
    run_log_path: str = "logs/urgent-notifications-runs.jsonl"
    lock_dir: str = "storage/locks"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.job_name:
            raise ValueError("job_name cannot be empty")
        if self.urgent_window_days < 0:
            raise ValueError(
                f"urgent_window_days must be non-negative, got {self.urgent_window_days}"
            )
        if not _SCHEDULE_PATTERN.match(self.schedule_time):
            raise ValueError(
                f"schedule_time must be HH:MM (24h), got {self.schedule_time!r}"
            )
        if self.lock_ttl_seconds <= 0:
            raise ValueError(
                f"lock_ttl_seconds must be positive, got {self.lock_ttl_seconds}"
            )
        if self.io_timeout_seconds <= 0:
            raise ValueError(
                f"io_timeout_seconds must be positive, got {self.io_timeout_seconds}"
            )
        if self.default_language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"default_language must be one of {SUPPORTED_LANGUAGES}, "
                f"got {self.default_language!r}"
            )

    @property
    def urgent_window(self) -> timedelta:
        """Lookahead of the URGENT tier as a timedelta."""
        return timedelta(days=self.urgent_window_days)

    @property
    def schedule_hour(self) -> int:
        return int(self.schedule_time.split(":")[0])

    @property
    def schedule_minute(self) -> int:
        return int(self.schedule_time.split(":")[1])

    @classmethod
    def from_environment(cls) -> NotificationJobConfig:
        """Create config from environment variables with defaults.

        Returns:
            NotificationJobConfig with values from environment or defaults.
        """
        return cls(
            urgent_window_days=_get_int_env("URGENT_NOTIFICATIONS_WINDOW_DAYS", 14),
            schedule_time=_get_str_env("URGENT_NOTIFICATIONS_SCHEDULE", "08:00") or "08:00",
            lock_ttl_seconds=_get_float_env("URGENT_NOTIFICATIONS_LOCK_TTL", 3600.0),
            io_timeout_seconds=_get_float_env("URGENT_NOTIFICATIONS_IO_TIMEOUT", 30.0),
            fallback_recipient_email=_get_str_env("URGENT_NOTIFICATIONS_FALLBACK_EMAIL"),
            summary_recipient_email=_get_str_env("URGENT_NOTIFICATIONS_SUMMARY_EMAIL"),
            default_language=_get_str_env("URGENT_NOTIFICATIONS_LANGUAGE", "en") or "en",
            output_log_path=_get_str_env(
                "URGENT_NOTIFICATIONS_OUTPUT_LOG", "logs/urgent-notifications.log"
            )
            or "logs/urgent-notifications.log",
            run_log_path=_get_str_env(
                "URGENT_NOTIFICATIONS_RUN_LOG", "logs/urgent-notifications-runs.jsonl"
            )
            or "logs/urgent-notifications-runs.jsonl",
            lock_dir=_get_str_env("URGENT_NOTIFICATIONS_LOCK_DIR", "storage/locks")
            or "storage/locks",
        )


@dataclass(frozen=True)
class StatusNotificationConfig:
    """Configuration for matter status change notifications.

    Attributes:
        routes: Recipient rule per new status. Statuses not listed are
            not notifiable.
        io_timeout_seconds: Timeout for every repository and sink call.
        default_language: Language for recipients without a preference.
    """

    routes: dict[MatterStatus, RecipientRule] = field(default_factory=_default_routes)
    io_timeout_seconds: float = 10.0
    default_language: str = "en"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.io_timeout_seconds <= 0:
            raise ValueError(
                f"io_timeout_seconds must be positive, got {self.io_timeout_seconds}"
            )
        if self.default_language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"default_language must be one of {SUPPORTED_LANGUAGES}, "
                f"got {self.default_language!r}"
            )

    def rule_for(self, status: MatterStatus) -> RecipientRule:
        """Return the recipient rule of a status (NOTIFY_NONE if unlisted)."""
        return self.routes.get(status, RecipientRule.NOTIFY_NONE)

    @classmethod
    def from_environment(cls) -> StatusNotificationConfig:
        """Create config from environment variables with defaults.

        Raises:
            ValueError: If STATUS_NOTIFICATION_ROUTES is malformed.
        """
        routes_text = _get_str_env("STATUS_NOTIFICATION_ROUTES")
        routes = parse_status_routes(routes_text) if routes_text else _default_routes()
        return cls(
            routes=routes,
            io_timeout_seconds=_get_float_env("STATUS_NOTIFICATION_IO_TIMEOUT", 10.0),
            default_language=_get_str_env("URGENT_NOTIFICATIONS_LANGUAGE", "en") or "en",
        )


DEFAULT_NOTIFICATION_JOB_CONFIG = NotificationJobConfig()

DEFAULT_STATUS_NOTIFICATION_CONFIG = StatusNotificationConfig()
