"""Per-channel, per-day line numbering (core domain)."""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import Callable, Optional

from core.models import LogRecord

# (channel, day) -> highest line number already stored, if any
HighWaterMarkLookup = Callable[[str, date], Optional[int]]


class LineSequencer:
    """Hand out line numbers per (channel, day), seeded from the index.

    The high-water mark is looked up once per pair and cached; later numbers
    are counted in-process. Records queued earlier in the same run are not
    committed yet, so re-querying the index would hand out duplicates. Create
    one sequencer per run.
    """

    def __init__(self, lookup: HighWaterMarkLookup) -> None:
        self._lookup = lookup
        self._cursors: dict[tuple[str, date], int] = {}

    def next_line_number(self, channel: str, day: date) -> int:
        key = (channel, day)
        if key not in self._cursors:
            self._cursors[key] = self._lookup(channel, day) or 0
        self._cursors[key] += 1
        return self._cursors[key]

    def assign(self, record: LogRecord) -> LogRecord:
        """Return a copy of the record carrying its line number."""

        line_number = self.next_line_number(record.channel, record.day)
        return dataclasses.replace(record, line_number=line_number)
