"""Run log adapters."""

from ipdocket.infrastructure.adapters.run_log.json_lines_run_log import (
    JsonLinesRunLog,
)

__all__ = ["JsonLinesRunLog"]
