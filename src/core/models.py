"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any index-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

INDEX_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_index_date(value: datetime) -> str:
    """Encode a timestamp the way the search index stores dates (UTC, 'Z')."""

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(INDEX_DATE_FORMAT)


def parse_index_date(value: str) -> datetime:
    """Decode an index date string back into an aware UTC datetime."""

    # Solr may return fractional seconds ("...T09:05:03.000Z").
    trimmed = value.rstrip("Z").split(".", 1)[0]
    return datetime.strptime(trimmed, "%Y-%m-%dT%H:%M:%S").replace(tzinfo=timezone.utc)


class ResumeDecision(str, Enum):
    """What to do with a record visited newest-first during a resumed scan."""

    KEEP = "keep"
    STOP_BOUNDARY_DUPLICATE = "stop_boundary_duplicate"
    STOP_PAST_RESUME_POINT = "stop_past_resume_point"

    @property
    def stops_scan(self) -> bool:
        return self is not ResumeDecision.KEEP


@dataclass(frozen=True)
class LogRecord:
    """One parsed chat line."""

    timestamp: datetime
    channel: str
    nick: str
    username: str
    message: str
    id: str
    line_number: Optional[int] = None

    @property
    def day(self) -> date:
        return self.timestamp.astimezone(timezone.utc).date()

    def to_document(self) -> dict[str, Any]:
        """Return the document shape submitted to the search index."""

        if self.line_number is None:
            raise ValueError(f"Record {self.id} has no line number yet")
        return {
            "id": self.id,
            "channel": self.channel,
            "datetime": format_index_date(self.timestamp),
            "username": self.username,
            "nick": self.nick,
            "message": self.message,
            "lineNumber": self.line_number,
        }


@dataclass(frozen=True)
class FileFailure:
    path: str
    reason: str


@dataclass(frozen=True)
class RecordError:
    record_id: str
    channel: str
    reason: str


@dataclass
class FileScanResult:
    """Outcome of scanning one file: kept records plus how the scan ended."""

    path: str
    records: list[LogRecord] = field(default_factory=list)
    stopped_by: Optional[ResumeDecision] = None
    failure: Optional[FileFailure] = None
    opened: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of handing one record to the index.

    `lost` holds the documents of a buffered batch whose write failed during
    this submission, including ones handed over by earlier submissions.
    """

    record: LogRecord
    error: Optional[str] = None
    lost: tuple[dict[str, Any], ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    """Aggregated, caller-visible result of one indexing run."""

    documents_indexed: int = 0
    records_collected: int = 0
    files_scanned: int = 0
    files_failed: list[FileFailure] = field(default_factory=list)
    record_errors: list[RecordError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.files_failed and not self.record_errors
