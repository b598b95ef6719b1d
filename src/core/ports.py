"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the search index, log reading and
progress reporting so that the core can be reused with different backends.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterator, Optional, Protocol

from core.models import LogRecord, ResumeDecision, RunSummary


class SearchIndexPort(Protocol):
    """Search index operations required by the core pipeline."""

    def last_indexed_timestamp(self) -> Optional[datetime]:
        ...

    def exists_in_partition(self, channel: str, record_id: str) -> bool:
        ...

    def last_line_number(self, channel: str, day: date) -> Optional[int]:
        ...

    def delete_all(self) -> None:
        ...

    def buffered_add(self, document: dict[str, Any]) -> None:
        ...

    def commit(self) -> None:
        ...

    def optimize(self, max_segments: int) -> None:
        ...


class LogReaderPort(Protocol):
    """Reads a log file last line first.

    read_lines raises FileOpenError immediately when the file cannot be
    opened; the returned iterator raises FileReadError on I/O failures.
    """

    def read_lines(self, path: str) -> Iterator[str]:
        ...


class ProgressPort(Protocol):
    """Observational progress notifications; they never steer the run."""

    def run_started(self, file_count: int, force_reindex: bool) -> None:
        ...

    def index_cleared(self) -> None:
        ...

    def file_started(self, path: str) -> None:
        ...

    def file_failed(self, path: str, reason: str) -> None:
        ...

    def file_finished(self, path: str, kept: int, stopped_by: Optional[ResumeDecision]) -> None:
        ...

    def record_error(self, record: LogRecord, reason: str) -> None:
        ...

    def optimizing(self) -> None:
        ...

    def run_finished(self, summary: RunSummary) -> None:
        ...


class NullProgress:
    """ProgressPort that ignores every notification."""

    def run_started(self, file_count: int, force_reindex: bool) -> None:
        pass

    def index_cleared(self) -> None:
        pass

    def file_started(self, path: str) -> None:
        pass

    def file_failed(self, path: str, reason: str) -> None:
        pass

    def file_finished(self, path: str, kept: int, stopped_by: Optional[ResumeDecision]) -> None:
        pass

    def record_error(self, record: LogRecord, reason: str) -> None:
        pass

    def optimizing(self) -> None:
        pass

    def run_finished(self, summary: RunSummary) -> None:
        pass
