"""Unit tests for JsonLinesRunLog."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from ipdocket.domain.models.job_run import (
    DispatchFailureEntry,
    JobRunOutcome,
    JobRunSummary,
)
from ipdocket.infrastructure.adapters.run_log.json_lines_run_log import JsonLinesRunLog

START = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def _summary(index: int, job_name: str = "tasks:send-urgent-notifications", **kw):
    at = START + timedelta(days=index)
    return JobRunSummary(
        run_id=f"run-{index}",
        job_name=job_name,
        as_of=at,
        started_at=at,
        finished_at=at + timedelta(seconds=3),
        outcome=kw.pop("outcome", JobRunOutcome.COMPLETED),
        **kw,
    )


@pytest.fixture
def run_log(tmp_path: Path) -> JsonLinesRunLog:
    return JsonLinesRunLog(tmp_path / "logs" / "runs.jsonl")


class TestJsonLinesRunLog:
    @pytest.mark.asyncio
    async def test_append_writes_one_line(self, run_log: JsonLinesRunLog) -> None:
        await run_log.append(_summary(0, scanned=4, notified=3, skipped=1))

        lines = run_log.path.read_text().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["notified"] == 3

    @pytest.mark.asyncio
    async def test_list_recent_newest_first(self, run_log: JsonLinesRunLog) -> None:
        for i in range(5):
            await run_log.append(_summary(i))

        recent = await run_log.list_recent(limit=3)

        assert [s.run_id for s in recent] == ["run-4", "run-3", "run-2"]

    @pytest.mark.asyncio
    async def test_entries_restore_failures(self, run_log: JsonLinesRunLog) -> None:
        original = _summary(
            0,
            outcome=JobRunOutcome.COMPLETED_WITH_FAILURES,
            failed=1,
            failures=(DispatchFailureEntry("actor-2", "HTTP 503"),),
        )
        await run_log.append(original)

        assert await run_log.list_recent() == [original]

    @pytest.mark.asyncio
    async def test_filter_by_job_name(self, run_log: JsonLinesRunLog) -> None:
        await run_log.append(_summary(0))
        await run_log.append(_summary(1, job_name="other:job"))

        recent = await run_log.list_recent(job_name="other:job")

        assert [s.run_id for s in recent] == ["run-1"]

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, run_log: JsonLinesRunLog) -> None:
        assert await run_log.list_recent() == []

    @pytest.mark.asyncio
    async def test_unreadable_lines_skipped(self, run_log: JsonLinesRunLog) -> None:
        await run_log.append(_summary(0))
        with run_log.path.open("a") as f:
            f.write("{truncated\n\n")
        await run_log.append(_summary(1))

        recent = await run_log.list_recent()

        assert [s.run_id for s in recent] == ["run-1", "run-0"]
