"""Backward file reader adapter.

Yields the lines of a file last line first by seeking backwards from EOF in
fixed-size chunks, so large logs never have to fit in memory.
"""

from __future__ import annotations

import re
from typing import BinaryIO, Iterator

from core.errors import FileOpenError, FileReadError

DEFAULT_CHUNK_SIZE = 8192

_LINE_BREAK = re.compile(rb"\r\n|\r|\n")


class BackwardFileReader:
    """LogReaderPort implementation over local files."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, encoding: str = "utf-8") -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size
        self._encoding = encoding

    def read_lines(self, path: str) -> Iterator[str]:
        """Open the file now and return a lazy iterator over its lines, last first.

        Each call starts again from the end of the file. Closing the iterator
        closes the file.
        """

        try:
            handle = open(path, "rb")
        except OSError as exc:
            raise FileOpenError(path, exc.strerror or str(exc)) from exc
        return self._iter_lines(handle, path)

    def _iter_lines(self, handle: BinaryIO, path: str) -> Iterator[str]:
        with handle:
            try:
                position = handle.seek(0, 2)
            except OSError as exc:
                raise FileReadError(path, str(exc)) from exc
            if position == 0:
                return

            # Holds the start of a line whose beginning lies in an earlier chunk.
            pending = b""
            at_eof = True
            while position > 0:
                try:
                    chunk, position = self._read_chunk_before(handle, position)
                except OSError as exc:
                    raise FileReadError(path, str(exc)) from exc

                parts = _LINE_BREAK.split(chunk + pending)
                pending = parts[0]
                complete = parts[1:]
                # A single trailing line break does not start an empty last line.
                if at_eof and complete and complete[-1] == b"":
                    complete.pop()
                at_eof = False
                for line in reversed(complete):
                    yield self._decode(line)

            yield self._decode(pending)

    def _read_chunk_before(self, handle: BinaryIO, position: int) -> tuple[bytes, int]:
        size = min(self._chunk_size, position)
        position -= size
        handle.seek(position)
        chunk = handle.read(size)
        # Never split "\r\n" across two chunks, or it reads as two line breaks.
        if position > 0 and chunk.startswith(b"\n"):
            handle.seek(position - 1)
            if handle.read(1) == b"\r":
                position -= 1
                chunk = b"\r" + chunk
        return chunk, position

    def _decode(self, line: bytes) -> str:
        return line.decode(self._encoding, errors="replace")
