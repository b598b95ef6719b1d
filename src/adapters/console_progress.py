"""Console progress adapter.

Renders pipeline notifications for operators running the indexer by hand or
from cron, with the same info/error colouring the console command always had.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape

from core.models import LogRecord, ResumeDecision, RunSummary

_STOP_LABELS = {
    ResumeDecision.STOP_BOUNDARY_DUPLICATE: "already indexed",
    ResumeDecision.STOP_PAST_RESUME_POINT: "reached last indexed line",
}


class ConsoleProgress:
    """ProgressPort implementation that prints to the terminal."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False) -> None:
        self._console = console or Console(highlight=False)
        self._verbose = verbose

    def _info(self, label: str, value: str = "") -> None:
        self._console.print(f"[green]{escape(label)}[/green]{escape(value)}")

    def _error(self, text: str) -> None:
        self._console.print(f"[red]{escape(text)}[/red]")

    def run_started(self, file_count: int, force_reindex: bool) -> None:
        mode = "full reindex" if force_reindex else "incremental"
        self._info("Indexing files: ", f"{file_count} ({mode})")

    def index_cleared(self) -> None:
        self._info("Deleted existing index")

    def file_started(self, path: str) -> None:
        self._info("  Indexing : ", path)

    def file_failed(self, path: str, reason: str) -> None:
        self._error(f"Failed to read file {path}: {reason}")

    def file_finished(self, path: str, kept: int, stopped_by: Optional[ResumeDecision]) -> None:
        if not self._verbose:
            return
        suffix = f", stopped: {_STOP_LABELS[stopped_by]}" if stopped_by in _STOP_LABELS else ""
        self._console.print(f"    {kept} new lines{escape(suffix)}", style="dim")

    def record_error(self, record: LogRecord, reason: str) -> None:
        self._error(f"Failed to index line {record.id} in #{record.channel}: {reason}")

    def optimizing(self) -> None:
        self._info("Optimizing the index")

    def run_finished(self, summary: RunSummary) -> None:
        self._info("Indexed documents: ", str(summary.documents_indexed))
        if summary.files_failed:
            self._error(f"Files failed: {len(summary.files_failed)}")
        if summary.record_errors:
            self._error(f"Lines failed: {len(summary.record_errors)}")
        self._info("Done")

    def fatal(self, reason: str) -> None:
        """Report an error that aborted the run."""

        self._error(f"Indexing aborted: {reason}")
