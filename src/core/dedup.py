"""Fingerprinting and resume/dedup decisions (core domain)."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime
from typing import Callable, Optional

from core.models import LogRecord, ResumeDecision

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# (channel, record_id) -> already in the index?
ExistsFn = Callable[[str, str], bool]


def strip_control_characters(text: str) -> str:
    """Remove ASCII control characters (0x00-0x1F, 0x7F), keep everything else."""

    return _CONTROL_CHARS.sub("", text)


def compute_record_id(date: str, channel: str, nick: str, username: str, message: str) -> str:
    """Return a deterministic fingerprint over the raw matched fields."""

    payload = "\n".join((date, channel, nick, username, message))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def decide(
    record: LogRecord,
    last_indexed: Optional[datetime],
    exists: ExistsFn,
) -> ResumeDecision:
    """Decide whether a record visited newest-first is new to the index.

    Log timestamps only have second precision, so several records can share
    the resume timestamp. For those we ask the index (scoped to the record's
    channel) whether this exact line was stored by a previous run.
    """

    if last_indexed is None:
        return ResumeDecision.KEEP

    if record.timestamp < last_indexed:
        return ResumeDecision.STOP_PAST_RESUME_POINT

    if record.timestamp == last_indexed and exists(record.channel, record.id):
        return ResumeDecision.STOP_BOUNDARY_DUPLICATE

    return ResumeDecision.KEEP
