"""Unit tests for notification pipeline configuration."""

from __future__ import annotations

from datetime import timedelta

import pytest

from ipdocket.config.notification_config import (
    DEFAULT_NOTIFICATION_JOB_CONFIG,
    URGENT_NOTIFICATIONS_JOB_NAME,
    NotificationJobConfig,
    RecipientRule,
    StatusNotificationConfig,
    parse_status_routes,
)
from ipdocket.domain.models.matter import MatterStatus

_JOB_ENV_VARS = (
    "URGENT_NOTIFICATIONS_WINDOW_DAYS",
    "URGENT_NOTIFICATIONS_SCHEDULE",
    "URGENT_NOTIFICATIONS_LOCK_TTL",
    "URGENT_NOTIFICATIONS_IO_TIMEOUT",
    "URGENT_NOTIFICATIONS_FALLBACK_EMAIL",
    "URGENT_NOTIFICATIONS_SUMMARY_EMAIL",
    "URGENT_NOTIFICATIONS_LANGUAGE",
    "URGENT_NOTIFICATIONS_OUTPUT_LOG",
    "URGENT_NOTIFICATIONS_RUN_LOG",
    "URGENT_NOTIFICATIONS_LOCK_DIR",
    "STATUS_NOTIFICATION_ROUTES",
    "STATUS_NOTIFICATION_IO_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _JOB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestNotificationJobConfigDefaults:
    def test_defaults(self) -> None:
        config = DEFAULT_NOTIFICATION_JOB_CONFIG

        assert config.job_name == URGENT_NOTIFICATIONS_JOB_NAME
        assert config.urgent_window == timedelta(days=14)
        assert config.schedule_hour == 8
        assert config.schedule_minute == 0
        assert config.fallback_recipient_email is None
        assert config.summary_recipient_email is None
        assert config.default_language == "en"

    def test_job_name_is_scheduler_command(self) -> None:
        assert URGENT_NOTIFICATIONS_JOB_NAME == "tasks:send-urgent-notifications"


class TestNotificationJobConfigValidation:
    @pytest.mark.parametrize("schedule", ["8:00", "24:00", "08:60", "0800", ""])
    def test_rejects_bad_schedule(self, schedule: str) -> None:
        with pytest.raises(ValueError, match="schedule_time"):
            NotificationJobConfig(schedule_time=schedule)

    def test_rejects_negative_window(self) -> None:
        with pytest.raises(ValueError, match="urgent_window_days"):
            NotificationJobConfig(urgent_window_days=-1)

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError, match="lock_ttl_seconds"):
            NotificationJobConfig(lock_ttl_seconds=0)

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError, match="io_timeout_seconds"):
            NotificationJobConfig(io_timeout_seconds=-5)

    def test_rejects_unsupported_language(self) -> None:
        with pytest.raises(ValueError, match="default_language"):
            NotificationJobConfig(default_language="es")

    def test_zero_window_allowed(self) -> None:
        assert NotificationJobConfig(urgent_window_days=0).urgent_window == timedelta(0)


class TestNotificationJobConfigFromEnvironment:
    def test_unset_environment_gives_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        assert NotificationJobConfig.from_environment() == NotificationJobConfig()

    def test_reads_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("URGENT_NOTIFICATIONS_WINDOW_DAYS", "7")
        clean_env.setenv("URGENT_NOTIFICATIONS_SCHEDULE", "06:30")
        clean_env.setenv("URGENT_NOTIFICATIONS_FALLBACK_EMAIL", "docketing@firm.com")
        clean_env.setenv("URGENT_NOTIFICATIONS_SUMMARY_EMAIL", "partners@firm.com")
        clean_env.setenv("URGENT_NOTIFICATIONS_LANGUAGE", "fr")
        clean_env.setenv("URGENT_NOTIFICATIONS_LOCK_DIR", "/tmp/locks")

        config = NotificationJobConfig.from_environment()

        assert config.urgent_window_days == 7
        assert (config.schedule_hour, config.schedule_minute) == (6, 30)
        assert config.fallback_recipient_email == "docketing@firm.com"
        assert config.summary_recipient_email == "partners@firm.com"
        assert config.default_language == "fr"
        assert config.lock_dir == "/tmp/locks"

    def test_invalid_numbers_fall_back(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("URGENT_NOTIFICATIONS_WINDOW_DAYS", "two weeks")
        clean_env.setenv("URGENT_NOTIFICATIONS_IO_TIMEOUT", "fast")

        config = NotificationJobConfig.from_environment()

        assert config.urgent_window_days == 14
        assert config.io_timeout_seconds == 30.0

    def test_blank_email_is_unset(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("URGENT_NOTIFICATIONS_FALLBACK_EMAIL", "   ")

        assert NotificationJobConfig.from_environment().fallback_recipient_email is None


class TestStatusRoutes:
    def test_default_routes(self) -> None:
        config = StatusNotificationConfig()

        assert config.rule_for(MatterStatus.GRANTED) is RecipientRule.NOTIFY_CLIENT
        assert config.rule_for(MatterStatus.DEAD) is RecipientRule.NOTIFY_RESPONSIBLE
        assert config.rule_for(MatterStatus.FILED) is RecipientRule.NOTIFY_NONE

    def test_unlisted_status_is_not_notifiable(self) -> None:
        assert StatusNotificationConfig().rule_for(MatterStatus.PUBLISHED) is (
            RecipientRule.NOTIFY_NONE
        )

    def test_parse_routes(self) -> None:
        routes = parse_status_routes(
            "Granted:notify-client, REF:notify-responsible,,Published:NOTIFY-NONE"
        )

        assert routes == {
            MatterStatus.GRANTED: RecipientRule.NOTIFY_CLIENT,
            MatterStatus.REFUSED: RecipientRule.NOTIFY_RESPONSIBLE,
            MatterStatus.PUBLISHED: RecipientRule.NOTIFY_NONE,
        }

    def test_parse_rejects_missing_separator(self) -> None:
        with pytest.raises(ValueError, match="Malformed"):
            parse_status_routes("Granted")

    def test_parse_rejects_unknown_rule(self) -> None:
        with pytest.raises(ValueError, match="Unknown recipient rule"):
            parse_status_routes("Granted:notify-everyone")

    def test_parse_rejects_unknown_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown matter status"):
            parse_status_routes("Lapsed:notify-client")

    def test_from_environment_routes(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("STATUS_NOTIFICATION_ROUTES", "Refused:notify-client")

        config = StatusNotificationConfig.from_environment()

        assert config.rule_for(MatterStatus.REFUSED) is RecipientRule.NOTIFY_CLIENT
        assert config.rule_for(MatterStatus.GRANTED) is RecipientRule.NOTIFY_NONE

    def test_from_environment_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        config = StatusNotificationConfig.from_environment()

        assert config.routes == StatusNotificationConfig().routes
        assert config.io_timeout_seconds == 10.0
