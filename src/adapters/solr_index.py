"""Solr search index adapter.

Talks to a Solr core over its JSON select/update API. Documents are queued
and posted in batches, the way a buffered-add client does.
"""

from __future__ import annotations

import base64
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from datetime import date, datetime
from typing import Any, Optional

from core.errors import IndexClientError, SubmissionError
from core.models import parse_index_date

LOGGER = logging.getLogger(__name__)


def quote_term(value: str) -> str:
    """Quote a value for use as a single Solr query term."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SolrLogIndex:
    """SearchIndexPort implementation backed by a Solr core."""

    def __init__(
        self,
        core_url: str,
        buffer_size: int = 100,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30,
    ) -> None:
        self._core_url = core_url.rstrip("/")
        self._buffer_size = max(1, buffer_size)
        self._buffer: list[dict[str, Any]] = []
        self._timeout = timeout
        self._auth_header = None
        if username:
            token = base64.b64encode(f"{username}:{password or ''}".encode("utf-8")).decode("ascii")
            self._auth_header = f"Basic {token}"

    def _endpoint(self, handler: str, params: Optional[dict[str, Any]] = None) -> str:
        query = dict(params or {})
        query.setdefault("wt", "json")
        return f"{self._core_url}/{handler}?{urllib.parse.urlencode(query, doseq=True)}"

    def _request(self, handler: str, params: Optional[dict[str, Any]] = None, payload: Any = None) -> dict:
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            self._endpoint(handler, params),
            data=data,
            method="POST" if data is not None else "GET",
        )
        if data is not None:
            request.add_header("Content-Type", "application/json")
        if self._auth_header:
            request.add_header("Authorization", self._auth_header)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                return json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise IndexClientError(f"Solr {handler} request failed", status=e.code, body=body) from e
        except urllib.error.URLError as e:
            raise IndexClientError(f"Solr {handler} request failed: {e.reason}") from e

    def _select(self, params: dict[str, Any]) -> dict:
        return self._request("select", {"q": "*:*", **params}).get("response", {})

    def last_indexed_timestamp(self) -> Optional[datetime]:
        """Return the newest indexed timestamp, or None for an empty core."""

        response = self._select({"sort": "datetime desc", "rows": 1, "fl": "datetime"})
        docs = response.get("docs", [])
        if not docs or not docs[0].get("datetime"):
            return None
        return parse_index_date(docs[0]["datetime"])

    def exists_in_partition(self, channel: str, record_id: str) -> bool:
        response = self._select(
            {
                "fq": [f"channel:{quote_term(channel)}", f"id:{quote_term(record_id)}"],
                "rows": 0,
            }
        )
        return int(response.get("numFound", 0)) > 0

    def last_line_number(self, channel: str, day: date) -> Optional[int]:
        start = f"{day.isoformat()}T00:00:00Z"
        response = self._select(
            {
                "fq": [f"channel:{quote_term(channel)}", f"datetime:[{start} TO {start}+1DAY}}"],
                "sort": "lineNumber desc",
                "rows": 1,
                "fl": "lineNumber",
            }
        )
        docs = response.get("docs", [])
        if not docs or docs[0].get("lineNumber") is None:
            return None
        return int(docs[0]["lineNumber"])

    def delete_all(self) -> None:
        self._buffer.clear()
        self._request("update", payload={"delete": {"query": "*:*"}})

    def buffered_add(self, document: dict[str, Any]) -> None:
        """Queue a document; the buffer is posted once it is full."""

        self._buffer.append(document)
        if len(self._buffer) >= self._buffer_size:
            self._flush()

    def commit(self) -> None:
        self._flush()
        self._request("update", payload={"commit": {}})

    def optimize(self, max_segments: int) -> None:
        self._request(
            "update",
            params={"optimize": "true", "maxSegments": max_segments, "waitSearcher": "false"},
        )

    def _flush(self) -> None:
        if not self._buffer:
            return
        batch, self._buffer = self._buffer, []
        try:
            self._request("update", payload=batch)
        except IndexClientError as exc:
            raise SubmissionError(
                f"Failed to post {len(batch)} buffered documents: {exc}", documents=batch
            ) from exc
        LOGGER.debug("Posted %s documents to %s", len(batch), self._core_url)
