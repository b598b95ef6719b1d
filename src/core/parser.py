"""Log line parsing (core domain).

Lines look like:

    [Mon Jan 7 09:05:03 2013] #channel nick user@host message text

Anything else (joins, parts, server notices) is not an error, it simply
does not match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.dedup import compute_record_id, strip_control_characters
from core.errors import DateParseError
from core.models import LogRecord

LOG_LINE_PATTERN = re.compile(
    r"""
    ^\[(?P<date>\w+\s+\w+\s+\d+\s+\d+:\d+:\d+\s\d+)\]
    \s\#
    (?P<channel>\S*)\s
    (?P<nick>\S*)\s
    (?P<username>[^@]*)@\S*\s
    (?P<message>.+)
    $""",
    re.VERBOSE,
)

LOG_DATE_FORMAT = "%a %b %d %H:%M:%S %Y"


@dataclass(frozen=True)
class LineMatch:
    """Raw named fields of a matching line, before any normalization."""

    date: str
    channel: str
    nick: str
    username: str
    message: str


def match_line(raw_line: str) -> Optional[LineMatch]:
    """Return the raw fields of a log line, or None when it has another shape."""

    match = LOG_LINE_PATTERN.match(raw_line.rstrip("\r\n"))
    if not match:
        return None
    return LineMatch(**match.groupdict())


def parse_log_date(raw_date: str) -> datetime:
    """Parse the bracketed log date as UTC."""

    try:
        parsed = datetime.strptime(raw_date, LOG_DATE_FORMAT)
    except ValueError as exc:
        raise DateParseError(raw_date) from exc
    return parsed.replace(tzinfo=timezone.utc)


def parse_line(raw_line: str) -> Optional[LogRecord]:
    """Build a LogRecord from one raw line, or None for non-matching lines.

    Raises DateParseError when the line has the right shape but a date we
    cannot read; that means our assumption about the format is broken.
    """

    fields = match_line(raw_line)
    if fields is None:
        return None

    return LogRecord(
        timestamp=parse_log_date(fields.date),
        channel=fields.channel,
        nick=fields.nick,
        username=fields.username,
        message=strip_control_characters(fields.message),
        id=compute_record_id(
            fields.date,
            fields.channel,
            fields.nick,
            fields.username,
            fields.message,
        ),
    )
