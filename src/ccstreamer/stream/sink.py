"""Output sink: stage one rendered line, then write and flush it whole."""
from __future__ import annotations

import select
import time
from typing import BinaryIO

from ..errors import OutputError


class Sink:
    """Write rendered lines to a binary stream, flushing after each line.

    Text for the line in flight is staged with :meth:`write` and only reaches
    the stream on :meth:`commit`, so a line that fails part-way through
    rendering is dropped with :meth:`discard` and never half-emitted.

    Args:
        stream:      Binary output stream.
        stall_limit: Consecutive writes accepting nothing (a non-blocking
                     stream returning None) before giving up.
        stall_wait:  Seconds to wait for the stream to become writable
                     between those attempts.
    """

    def __init__(self, stream: BinaryIO, stall_limit: int = 50, stall_wait: float = 0.1) -> None:
        if stall_limit < 1:
            raise ValueError("stall_limit must be a positive integer")
        self._stream = stream
        self._pending: list[str] = []
        self._stall_limit = stall_limit
        self._stall_wait = stall_wait
        self.lines_written = 0
        self.bytes_written = 0

    def write(self, chunk: str) -> None:
        self._pending.append(chunk)

    def discard(self) -> None:
        self._pending.clear()

    def commit(self) -> str:
        """Write the staged text in full, flush, and return it."""
        text = "".join(self._pending)
        self._pending.clear()
        encoded = text.encode("utf-8")
        data = memoryview(encoded)
        stalls = 0
        try:
            while data:
                written = self._stream.write(data)
                if written is None:
                    stalls += 1
                    if stalls >= self._stall_limit:
                        raise OutputError(
                            f"output stream accepted no data after {stalls} attempts"
                        )
                    self._wait_writable()
                    continue
                stalls = 0
                data = data[written:]
            self._stream.flush()
        except OSError as exc:
            raise OutputError(f"failed to write output: {exc}") from exc
        self.lines_written += 1
        self.bytes_written += len(encoded)
        return text

    def _wait_writable(self) -> None:
        try:
            fd = self._stream.fileno()
        except (OSError, ValueError):
            time.sleep(self._stall_wait)
            return
        select.select([], [fd], [], self._stall_wait)

    def flush(self) -> None:
        try:
            self._stream.flush()
        except OSError as exc:
            raise OutputError(f"failed to flush output: {exc}") from exc

    @property
    def pending(self) -> bool:
        return bool(self._pending)
