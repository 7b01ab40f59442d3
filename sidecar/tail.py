"""``tail -f`` style follower for the debug stream shown under the graphs."""

from __future__ import annotations

import logging
import os
import sys
from collections import deque
from typing import BinaryIO

logger = logging.getLogger(__name__)

MAX_DEBUG_LINES = 12
MAX_LINE_BYTES = 1023  # longer lines are split into pieces of this size
READ_CHUNK = 4096


class DebugLogBuffer:
    """The most recent lines of the followed file; older lines fall off the top."""

    def __init__(self, capacity: int = MAX_DEBUG_LINES) -> None:
        self._lines: deque[str] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def capacity(self) -> int:
        return self._lines.maxlen or 0

    def append(self, line: str) -> None:
        self._lines.append(line)

    def lines(self) -> list[str]:
        return list(self._lines)

    def tail(self, n: int) -> list[str]:
        """Newest *n* lines, oldest first."""
        if n <= 0:
            return []
        return list(self._lines)[-n:]


class TailFile:
    """Follows a growing text file without reopening it.

    Reaching end-of-file is never terminal: every ``drain`` reads whatever
    has been appended since the last one.
    """

    def __init__(self, path: str, fh: BinaryIO, buffer: DebugLogBuffer) -> None:
        self.path = path
        self.buffer = buffer
        self._fh = fh
        self._partial = b""

    @classmethod
    def open(cls, path: str, buffer: DebugLogBuffer | None = None) -> TailFile | None:
        """Open *path* positioned at its end.

        Returns None (and the feature stays off for the run) if the file
        can't be opened.
        """
        try:
            fh = open(path, "rb")
        except OSError as e:
            print(f"sidecar: unable to load debug file {path}: {e}", file=sys.stderr)
            logger.warning("tail disabled, cannot open %s: %s", path, e)
            return None
        fh.seek(0, os.SEEK_END)
        logger.info("following %s from offset %d", path, fh.tell())
        return cls(path, fh, buffer if buffer is not None else DebugLogBuffer())

    def drain(self) -> int:
        """Move every complete new line into the buffer; return how many.

        Reads in ``READ_CHUNK`` pieces and never holds more than
        ``MAX_LINE_BYTES`` of an unfinished line.
        """
        self._check_truncated()
        count = 0
        while True:
            data = self._fh.read(READ_CHUNK)
            if not data:
                return count

            chunks = (self._partial + data).split(b"\n")
            # Last chunk has no newline yet; hold it until the writer finishes it
            self._partial = chunks.pop()
            for raw in chunks:
                count += self._emit(raw)
            while len(self._partial) >= MAX_LINE_BYTES:
                self._append(self._partial[:MAX_LINE_BYTES])
                self._partial = self._partial[MAX_LINE_BYTES:]
                count += 1

    def _emit(self, raw: bytes) -> int:
        count = 1
        while len(raw) > MAX_LINE_BYTES:
            self._append(raw[:MAX_LINE_BYTES])
            raw = raw[MAX_LINE_BYTES:]
            count += 1
        self._append(raw)
        return count

    def _append(self, raw: bytes) -> None:
        self.buffer.append(raw.decode("utf-8", errors="replace").rstrip("\r\n"))

    def _check_truncated(self) -> None:
        try:
            size = os.fstat(self._fh.fileno()).st_size
        except OSError:
            return
        if size < self._fh.tell():
            logger.info("%s was truncated, reading from the start", self.path)
            self._fh.seek(0)
            self._partial = b""

    def close(self) -> None:
        self._fh.close()
