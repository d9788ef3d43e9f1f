"""JSON-lines run log.

One JobRunSummary per line, appended and never rewritten. Readable with
standard tooling (``tail -1 logs/urgent-notifications-runs.jsonl | jq``).
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from structlog import get_logger

from ipdocket.application.ports.run_log import RunLogProtocol
from ipdocket.domain.models.job_run import JobRunSummary

logger = get_logger(__name__)


class JsonLinesRunLog(RunLogProtocol):
    """Run log stored as a JSON-lines file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def append(self, summary: JobRunSummary) -> None:
        line = json.dumps(summary.to_dict(), sort_keys=True)
        async with self._lock:
            await asyncio.to_thread(self._append_line, line)

    async def list_recent(
        self, limit: int = 20, job_name: str | None = None
    ) -> list[JobRunSummary]:
        async with self._lock:
            lines = await asyncio.to_thread(self._read_lines)

        summaries: list[JobRunSummary] = []
        for number, line in reversed(list(enumerate(lines, start=1))):
            if len(summaries) >= limit:
                break
            if not line.strip():
                continue
            try:
                summary = JobRunSummary.from_dict(json.loads(line))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning(
                    "run_log_line_unreadable",
                    path=str(self._path),
                    line=number,
                    error=str(e),
                )
                continue
            if job_name is None or summary.job_name == job_name:
                summaries.append(summary)
        return summaries

    def _append_line(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def _read_lines(self) -> list[str]:
        try:
            return self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
