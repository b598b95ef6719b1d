"""Helpers for ordering log files newest-first."""

from __future__ import annotations

import os
import re
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Tuple

# "#channel[2013.01.07].log"; the live file of a channel has no date suffix.
LOG_FILENAME_PATTERN = re.compile(
    r"^#(?P<channel>[^\[\]]+?)"
    r"(?:\[(?P<year>\d{4})\.(?P<month>\d{2})\.(?P<day>\d{2})\])?"
    r"\.[^.]+$"
)


def split_log_filename(path: str) -> Tuple[Optional[str], Optional[date]]:
    """Split a log file path into (channel, embedded date)."""

    match = LOG_FILENAME_PATTERN.match(os.path.basename(path))
    if not match:
        return None, None
    if match.group("year") is None:
        return match.group("channel"), None
    try:
        embedded = date(int(match.group("year")), int(match.group("month")), int(match.group("day")))
    except ValueError:
        return match.group("channel"), None
    return match.group("channel"), embedded


def _utc_today() -> date:
    # Log timestamps are read as UTC, so "today" is the UTC date as well.
    return datetime.now(timezone.utc).date()


def file_date(path: str, today: Optional[date] = None) -> date:
    """Return the date a file sorts by; undated files count as today."""

    _, embedded = split_log_filename(path)
    if embedded is not None:
        return embedded
    return today or _utc_today()


def order_log_files(paths: Iterable[str], today: Optional[date] = None) -> List[str]:
    """Sort log files newest first.

    Scanning newest file first, each file last line first, visits records in
    reverse chronological order, which the resume logic relies on.
    """

    today = today or _utc_today()
    return sorted(paths, key=lambda path: (file_date(path, today), path), reverse=True)
