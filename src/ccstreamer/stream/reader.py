"""Line source: split a byte stream into lines as data arrives.

Lines are yielded as soon as their terminating newline has been read, so a
slow producer on a pipe sees each line rendered without waiting for a block
to fill. There is no maximum line length: the internal buffer simply grows.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

from ..errors import InputError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


class LineReader:
    """Read newline-terminated lines from a binary stream.

    Usage::

        reader = LineReader(sys.stdin.buffer)
        for line in reader.lines():
            handle(line)
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._stream = stream
        self._chunk_size = chunk_size
        # read1() returns whatever is available instead of blocking for a full chunk
        self._read = getattr(stream, "read1", None) or stream.read
        self._buffer = bytearray()
        self._scan_from = 0
        self._eof = False
        self.lines_read = 0

    def _fill(self) -> None:
        try:
            chunk = self._read(self._chunk_size)
        except OSError as exc:
            raise InputError(f"failed to read input: {exc}") from exc
        if not chunk:
            self._eof = True
            return
        self._buffer += chunk

    def _take(self, end: int, skip: int) -> bytes:
        line = bytes(self._buffer[:end])
        del self._buffer[: end + skip]
        self._scan_from = 0
        if line.endswith(b"\r"):
            line = line[:-1]
        self.lines_read += 1
        return line

    def lines(self) -> Iterator[bytes]:
        """Yield lines (without terminator) until end-of-stream.

        Calling again after a partial iteration resumes where the previous
        call stopped. Trailing bytes with no final newline are a line too.
        """
        while True:
            newline = self._buffer.find(b"\n", self._scan_from)
            if newline >= 0:
                yield self._take(newline, 1)
                continue
            self._scan_from = len(self._buffer)
            if self._eof:
                if self._buffer:
                    yield self._take(len(self._buffer), 0)
                logger.debug("End of input after %d line(s)", self.lines_read)
                return
            self._fill()

    @property
    def buffered(self) -> int:
        """Bytes read from the stream but not yet returned as a line."""
        return len(self._buffer)
