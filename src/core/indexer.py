"""Incremental log indexing pipeline.

This module is index-agnostic. It only relies on ports for the search index,
log reading and progress reporting. A run enforces a strict order:
1) Optionally clear the index (forced reindex)
2) Look up the resume point
3) Scan files newest-first, each file last line first, until the resume point
4) Reverse the collected records into chronological order
5) Number lines per (channel, day) and submit documents
6) Commit, then optimize
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from core.config import IndexingConfig
from core.dedup import decide
from core.errors import DateParseError, DeleteAllError, FileOpenError, SubmissionError
from core.file_ordering import order_log_files
from core.models import (
    FileFailure,
    FileScanResult,
    LogRecord,
    RecordError,
    RunSummary,
    SubmissionResult,
)
from core.parser import parse_line
from core.ports import LogReaderPort, NullProgress, ProgressPort, SearchIndexPort
from core.sequencer import LineSequencer

LOGGER = logging.getLogger(__name__)

# (channel, id, lineNumber) is unique among the documents of one run.
DocumentKey = Tuple[str, str, Optional[int]]


class LogIndexer:
    """Orchestrates scanning, resume/dedup, line numbering and submission.

    One instance may run several times, but never concurrently against the
    same index: two runs would read the same high-water marks and hand out
    colliding line numbers. Callers enforce that exclusivity.
    """

    def __init__(
        self,
        index: SearchIndexPort,
        reader: LogReaderPort,
        progress: Optional[ProgressPort] = None,
        config: Optional[IndexingConfig] = None,
    ) -> None:
        self._index = index
        self._reader = reader
        self._progress = progress or NullProgress()
        self._config = config or IndexingConfig()

    def run(self, paths: Iterable[str], force_reindex: bool = False) -> RunSummary:
        """Index everything newer than the resume point and return a summary."""

        ordered = order_log_files(paths)
        summary = RunSummary()
        self._progress.run_started(len(ordered), force_reindex)

        if force_reindex:
            self._clear_index()
            last_indexed = None
        else:
            last_indexed = self._index.last_indexed_timestamp()
        LOGGER.info("Resuming after %s", last_indexed.isoformat() if last_indexed else "nothing (full index)")

        collected: list[LogRecord] = []
        for path in ordered:
            result = self._scan_file(path, last_indexed)
            if result.opened:
                summary.files_scanned += 1
            # Records read before a mid-file failure are still valid.
            collected.extend(result.records)
            if result.failure is not None:
                summary.files_failed.append(result.failure)

        # Files were read newest-first; line numbers must follow chronology.
        collected.reverse()
        summary.records_collected = len(collected)

        # Documents handed to the index that no failed batch has taken back yet.
        accepted: dict[DocumentKey, LogRecord] = {}
        sequencer = LineSequencer(self._index.last_line_number)
        for record in collected:
            submission = self._submit(sequencer, record)
            self._drop_lost(summary, accepted, submission.lost, submission.error or "")
            if submission.ok:
                accepted[_record_key(submission.record)] = submission.record
            else:
                self._record_failed(summary, record, submission.error or "")

        self._commit(summary, accepted)
        summary.documents_indexed = len(accepted)

        if self._config.optimize:
            self._progress.optimizing()
            try:
                self._index.optimize(self._config.optimize_max_segments)
            except Exception:
                # Documents are already committed; a failed optimize only costs search speed.
                LOGGER.exception("Index optimization failed")

        LOGGER.info(
            "Indexing complete: files=%s, failed_files=%s, documents=%s, record_errors=%s",
            summary.files_scanned,
            len(summary.files_failed),
            summary.documents_indexed,
            len(summary.record_errors),
        )
        self._progress.run_finished(summary)
        return summary

    def _clear_index(self) -> None:
        LOGGER.info("Deleting existing index")
        try:
            self._index.delete_all()
            self._index.commit()
        except Exception as exc:
            raise DeleteAllError(f"Failed to clear the index: {exc}") from exc
        self._progress.index_cleared()

    def _scan_file(self, path: str, last_indexed: Optional[datetime]) -> FileScanResult:
        """Collect new records from one file, newest line first."""

        result = FileScanResult(path=path)
        try:
            lines = self._reader.read_lines(path)
        except FileOpenError as exc:
            LOGGER.warning("Skipping %s: %s", path, exc.reason)
            result.failure = FileFailure(path=path, reason=str(exc))
            self._progress.file_failed(path, str(exc))
            return result

        result.opened = True
        self._progress.file_started(path)
        try:
            for raw_line in lines:
                record = parse_line(raw_line)
                if record is None:
                    continue
                decision = decide(record, last_indexed, self._index.exists_in_partition)
                if decision.stops_scan:
                    result.stopped_by = decision
                    break
                result.records.append(record)
        except DateParseError:
            raise
        except Exception as exc:
            LOGGER.exception("Failed to read %s", path)
            result.failure = FileFailure(path=path, reason=str(exc))
            self._progress.file_failed(path, str(exc))
            return result
        finally:
            close = getattr(lines, "close", None)
            if close is not None:
                close()

        LOGGER.debug("Scanned %s: kept=%s, stopped_by=%s", path, len(result.records), result.stopped_by)
        self._progress.file_finished(path, len(result.records), result.stopped_by)
        return result

    def _submit(self, sequencer: LineSequencer, record: LogRecord) -> SubmissionResult:
        try:
            numbered = sequencer.assign(record)
            self._index.buffered_add(numbered.to_document())
        except SubmissionError as exc:
            LOGGER.error("Failed to submit %s (#%s): %s", record.id, record.channel, exc)
            return SubmissionResult(record=record, error=str(exc), lost=tuple(exc.documents))
        except Exception as exc:
            LOGGER.error("Failed to submit %s (#%s): %s", record.id, record.channel, exc)
            return SubmissionResult(record=record, error=str(exc))
        return SubmissionResult(record=numbered)

    def _commit(self, summary: RunSummary, accepted: dict[DocumentKey, LogRecord]) -> None:
        try:
            self._index.commit()
            return
        except SubmissionError as exc:
            if not exc.documents:
                raise SubmissionError(f"Failed to commit indexed documents: {exc}") from exc
            LOGGER.error("Final batch was not stored: %s", exc)
            self._drop_lost(summary, accepted, exc.documents, str(exc))
        except Exception as exc:
            raise SubmissionError(f"Failed to commit indexed documents: {exc}") from exc

        # The failed batch already left the buffer; commit what earlier batches wrote.
        try:
            self._index.commit()
        except Exception as exc:
            raise SubmissionError(f"Failed to commit indexed documents: {exc}") from exc

    def _drop_lost(
        self,
        summary: RunSummary,
        accepted: dict[DocumentKey, LogRecord],
        documents: Iterable[dict[str, Any]],
        reason: str,
    ) -> None:
        for document in documents:
            record = accepted.pop(_document_key(document), None)
            if record is not None:
                self._record_failed(summary, record, reason)

    def _record_failed(self, summary: RunSummary, record: LogRecord, reason: str) -> None:
        summary.record_errors.append(RecordError(record_id=record.id, channel=record.channel, reason=reason))
        self._progress.record_error(record, reason)


def _record_key(record: LogRecord) -> DocumentKey:
    return record.channel, record.id, record.line_number


def _document_key(document: dict[str, Any]) -> DocumentKey:
    return document.get("channel", ""), document.get("id", ""), document.get("lineNumber")
