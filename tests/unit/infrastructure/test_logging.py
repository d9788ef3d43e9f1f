"""Unit tests for structured logging configuration."""

import json
from collections.abc import Iterator
from io import StringIO

import pytest
import structlog

from ipdocket.infrastructure.observability.correlation import set_correlation_id
from ipdocket.infrastructure.observability.logging import configure_structlog


@pytest.fixture(autouse=True)
def _restore_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    set_correlation_id("")


def _renderer_types() -> list[type]:
    return [type(p) for p in structlog.get_config()["processors"]]


class TestConfigureStructlog:
    def test_production_renders_json(self) -> None:
        configure_structlog(environment="production")

        assert structlog.processors.JSONRenderer in _renderer_types()

    def test_development_renders_console(self) -> None:
        configure_structlog(environment="development")

        types = _renderer_types()
        assert structlog.dev.ConsoleRenderer in types
        assert structlog.processors.JSONRenderer not in types

    def test_defaults_to_production(self) -> None:
        configure_structlog()

        assert structlog.processors.JSONRenderer in _renderer_types()


class TestLogOutput:
    def test_json_entry_fields(self) -> None:
        stream = StringIO()
        configure_structlog(environment="production", stream=stream)
        set_correlation_id("run-42")

        structlog.get_logger("test").info("urgent_batch_dispatched", recipient_id="a1")

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["event"] == "urgent_batch_dispatched"
        assert entry["level"] == "info"
        assert entry["recipient_id"] == "a1"
        assert entry["correlation_id"] == "run-42"
        assert "timestamp" in entry

    def test_contextvars_bound_id_wins(self) -> None:
        stream = StringIO()
        configure_structlog(environment="production", stream=stream)
        set_correlation_id("request-1")

        with structlog.contextvars.bound_contextvars(correlation_id="run-7"):
            structlog.get_logger("test").info("urgent_notifications_started")

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["correlation_id"] == "run-7"

    def test_level_filters_debug(self) -> None:
        stream = StringIO()
        configure_structlog(environment="production", level="WARNING", stream=stream)

        log = structlog.get_logger("test")
        log.info("quiet")
        log.warning("loud")

        lines = stream.getvalue().strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["loud"]

    def test_exception_info_rendered(self) -> None:
        stream = StringIO()
        configure_structlog(environment="production", stream=stream)

        try:
            raise RuntimeError("boom")
        except RuntimeError:
            structlog.get_logger("test").exception("urgent_notifications_run_crashed")

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert "RuntimeError: boom" in entry["exception"]
