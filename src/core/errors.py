"""Error taxonomy for the indexing pipeline.

File- and record-scoped errors are recovered by the pipeline and reported in
the run summary. DateParseError and DeleteAllError are fatal and propagate.
"""

from __future__ import annotations

from typing import Any, Optional


class IndexerError(Exception):
    """Base class for all irclog-indexer errors."""


class FileOpenError(IndexerError):
    """A log file could not be opened (missing, unreadable)."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to open file {path}: {reason}")
        self.path = path
        self.reason = reason


class FileReadError(IndexerError):
    """An I/O failure happened part way through a log file."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read file {path}: {reason}")
        self.path = path
        self.reason = reason


class DateParseError(IndexerError):
    """A line matched the log format but its date could not be parsed."""

    def __init__(self, raw_date: str) -> None:
        super().__init__(f"Could not parse date: {raw_date}")
        self.raw_date = raw_date


class SubmissionError(IndexerError):
    """The index rejected or failed to accept one or more documents.

    When a buffered batch fails to write, `documents` holds every document
    of that batch; they were dropped from the buffer and never stored.
    """

    def __init__(self, message: str, documents: Optional[list[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.documents = list(documents or [])


class DeleteAllError(IndexerError):
    """Clearing the index before a forced reindex failed."""


class IndexClientError(IndexerError):
    """An index backend returned an error response."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message if status is None else f"{message} (HTTP {status}): {body}")
        self.status = status
        self.body = body
