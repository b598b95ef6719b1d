"""SQLite search index adapter.

Implements the core SearchIndexPort using a simple SQLite database, for
running without a Solr server (local setups, offline archives, tests).
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Iterator, Optional

from core.errors import SubmissionError
from core.models import parse_index_date

LOGGER = logging.getLogger(__name__)

_COLUMNS = ("id", "channel", "datetime", "username", "nick", "message", "lineNumber")


class SQLiteLogIndex:
    """Thin SQLite wrapper that satisfies the SearchIndexPort contract."""

    def __init__(self, db_path: str, buffer_size: int = 100) -> None:
        self._db_path = db_path
        self._buffer_size = max(1, buffer_size)
        self._buffer: list[dict[str, Any]] = []

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the lines table if it does not exist."""

        with self._connect() as conn:
            # lines holds one row per indexed chat line.
            # Fields:
            # - id: content fingerprint; unique within a channel
            # - channel: channel name without the leading '#'
            # - datetime: UTC timestamp as YYYY-MM-DDTHH:MM:SSZ (sorts as text)
            # - username / nick / message: parsed line fields
            # - line_number: per channel and day, assigned in chronological order
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS lines (
                    id TEXT NOT NULL,
                    channel TEXT NOT NULL,
                    datetime TEXT NOT NULL,
                    username TEXT,
                    nick TEXT,
                    message TEXT,
                    line_number INTEGER NOT NULL,
                    PRIMARY KEY (channel, id)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS lines_datetime ON lines (datetime)")
            conn.execute("CREATE INDEX IF NOT EXISTS lines_channel_day ON lines (channel, datetime)")

    def last_indexed_timestamp(self) -> Optional[datetime]:
        """Return the newest indexed timestamp, or None for an empty index."""

        with self._connect() as conn:
            row = conn.execute("SELECT MAX(datetime) AS latest FROM lines").fetchone()
        if row is None or row["latest"] is None:
            return None
        return parse_index_date(row["latest"])

    def exists_in_partition(self, channel: str, record_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM lines WHERE channel = ? AND id = ?",
                (channel, record_id),
            ).fetchone()
        return row is not None

    def last_line_number(self, channel: str, day: date) -> Optional[int]:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT MAX(line_number) AS last_line
                FROM lines
                WHERE channel = ? AND substr(datetime, 1, 10) = ?
                """,
                (channel, day.isoformat()),
            ).fetchone()
        if row is None or row["last_line"] is None:
            return None
        return int(row["last_line"])

    def delete_all(self) -> None:
        self._buffer.clear()
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM lines")
        LOGGER.info("Deleted %s documents", cur.rowcount)

    def buffered_add(self, document: dict[str, Any]) -> None:
        """Queue a document; the buffer is written once it is full."""

        missing = [column for column in _COLUMNS if column not in document]
        if missing:
            raise SubmissionError(f"Document {document.get('id')} is missing {', '.join(missing)}")
        self._buffer.append(document)
        if len(self._buffer) >= self._buffer_size:
            self._flush()

    def commit(self) -> None:
        self._flush()

    def optimize(self, max_segments: int) -> None:
        # SQLite has no segments; VACUUM is the closest housekeeping step.
        with self._connect() as conn:
            conn.execute("VACUUM")

    def _flush(self) -> None:
        if not self._buffer:
            return
        batch, self._buffer = self._buffer, []
        rows = [tuple(document[column] for column in _COLUMNS) for document in batch]
        try:
            with self._connect() as conn:
                # Re-adding an id replaces the stored line, like a Solr add.
                conn.executemany(
                    """
                    INSERT OR REPLACE INTO lines (
                        id, channel, datetime, username, nick, message, line_number
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        except sqlite3.Error as exc:
            raise SubmissionError(
                f"Failed to write {len(batch)} buffered documents: {exc}", documents=batch
            ) from exc
        LOGGER.debug("Flushed %s documents to %s", len(batch), self._db_path)
