"""Tests for the line source and the output sink."""
from __future__ import annotations

import io

import pytest

from ccstreamer.errors import InputError, OutputError, StreamIOError
from ccstreamer.stream.reader import LineReader
from ccstreamer.stream.sink import Sink


class _Trickle:
    """Binary stream that hands out at most ``step`` bytes per read (no read1)."""

    def __init__(self, data: bytes, step: int = 1) -> None:
        self._data = data
        self._pos = 0
        self._step = step
        self.reads = 0

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        chunk = self._data[self._pos : self._pos + min(size, self._step)]
        self._pos += len(chunk)
        return chunk


class _FailingReader:
    def read(self, size: int = -1) -> bytes:
        raise OSError("device not ready")


class _ShortWriter(io.BytesIO):
    """Accepts at most three bytes per write call."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0
        self.flushes = 0

    def write(self, data) -> int:  # type: ignore[override]
        self.calls += 1
        return super().write(bytes(data[:3]))

    def flush(self) -> None:
        self.flushes += 1


class _BrokenWriter(io.BytesIO):
    def write(self, data) -> int:  # type: ignore[override]
        raise BrokenPipeError("reader went away")


class _StallingWriter(io.BytesIO):
    """Non-blocking style stream: returns None for the first ``stalls`` writes."""

    def __init__(self, stalls: int) -> None:
        super().__init__()
        self.stalls = stalls
        self.calls = 0

    def write(self, data) -> int | None:  # type: ignore[override]
        self.calls += 1
        if self.calls <= self.stalls:
            return None
        return super().write(bytes(data))


# ---------------------------------------------------------------------------
# LineReader
# ---------------------------------------------------------------------------

class TestLineReader:
    def test_splits_on_newline(self) -> None:
        reader = LineReader(io.BytesIO(b'{"a":1}\n{"b":2}\n'))
        assert list(reader.lines()) == [b'{"a":1}', b'{"b":2}']
        assert reader.lines_read == 2

    def test_trailing_line_without_newline_is_kept(self) -> None:
        reader = LineReader(io.BytesIO(b"one\ntwo"))
        assert list(reader.lines()) == [b"one", b"two"]

    def test_crlf_is_stripped(self) -> None:
        reader = LineReader(io.BytesIO(b"one\r\ntwo\r\n"))
        assert list(reader.lines()) == [b"one", b"two"]

    def test_empty_input(self) -> None:
        assert list(LineReader(io.BytesIO(b"")).lines()) == []

    def test_blank_lines_are_yielded(self) -> None:
        reader = LineReader(io.BytesIO(b"a\n\n\nb\n"))
        assert list(reader.lines()) == [b"a", b"", b"", b"b"]

    def test_line_longer_than_chunk(self) -> None:
        long_line = b"x" * 10_000
        reader = LineReader(io.BytesIO(long_line + b"\nshort\n"), chunk_size=16)
        assert list(reader.lines()) == [long_line, b"short"]

    def test_trickling_stream_without_read1(self) -> None:
        stream = _Trickle(b'{"a":1}\n[2]\n', step=1)
        reader = LineReader(stream)  # type: ignore[arg-type]
        assert list(reader.lines()) == [b'{"a":1}', b"[2]"]
        assert stream.reads > 10

    def test_first_line_available_before_stream_ends(self) -> None:
        stream = _Trickle(b"first\nsecond\n", step=6)
        reader = LineReader(stream)  # type: ignore[arg-type]
        lines = reader.lines()
        assert next(lines) == b"first"
        # only the bytes of the first line have been consumed so far
        assert stream.reads == 1

    def test_resumes_across_calls(self) -> None:
        reader = LineReader(io.BytesIO(b"1\n2\n3\n"))
        assert next(reader.lines()) == b"1"
        assert list(reader.lines()) == [b"2", b"3"]

    def test_reads_buffered_file(self, tmp_jsonl_file, message_lines) -> None:
        path = tmp_jsonl_file(message_lines)
        with path.open("rb") as fh:
            reader = LineReader(fh, chunk_size=64)
            lines = list(reader.lines())
        assert [line.decode("utf-8") for line in lines] == message_lines
        assert reader.buffered == 0

    def test_read_failure_raises_input_error(self) -> None:
        reader = LineReader(_FailingReader())  # type: ignore[arg-type]
        with pytest.raises(InputError) as info:
            list(reader.lines())
        assert isinstance(info.value, StreamIOError)
        assert "device not ready" in str(info.value)

    def test_invalid_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            LineReader(io.BytesIO(b""), chunk_size=0)


# ---------------------------------------------------------------------------
# Sink
# ---------------------------------------------------------------------------

class TestSink:
    def test_commit_writes_staged_text(self) -> None:
        out = io.BytesIO()
        sink = Sink(out)
        sink.write("{\n")
        sink.write("}\n")
        assert out.getvalue() == b""
        assert sink.commit() == "{\n}\n"
        assert out.getvalue() == b"{\n}\n"
        assert sink.lines_written == 1
        assert sink.bytes_written == 4

    def test_discard_drops_partial_line(self) -> None:
        out = io.BytesIO()
        sink = Sink(out)
        sink.write('{\n  "a": ')
        assert sink.pending
        sink.discard()
        assert not sink.pending
        sink.write("1\n")
        sink.commit()
        assert out.getvalue() == b"1\n"

    def test_encodes_utf8(self) -> None:
        out = io.BytesIO()
        sink = Sink(out)
        sink.write('"héllo ✓"\n')
        sink.commit()
        assert out.getvalue() == '"héllo ✓"\n'.encode("utf-8")

    def test_partial_writes_are_retried(self) -> None:
        out = _ShortWriter()
        sink = Sink(out)
        sink.write("0123456789\n")
        sink.commit()
        assert out.getvalue() == b"0123456789\n"
        assert out.calls == 4
        assert out.flushes == 1

    def test_write_failure_raises_output_error(self) -> None:
        sink = Sink(_BrokenWriter())
        sink.write("x\n")
        with pytest.raises(OutputError):
            sink.commit()

    def test_stalled_writes_are_retried(self) -> None:
        out = _StallingWriter(stalls=2)
        sink = Sink(out, stall_wait=0)
        sink.write("[1]\n")
        assert sink.commit() == "[1]\n"
        assert out.getvalue() == b"[1]\n"
        assert out.calls == 3

    def test_stream_that_never_accepts_data(self) -> None:
        out = _StallingWriter(stalls=1_000_000)
        sink = Sink(out, stall_limit=5, stall_wait=0)
        sink.write("x\n")
        with pytest.raises(OutputError, match="accepted no data"):
            sink.commit()
        assert out.calls == 5

    def test_invalid_stall_limit(self) -> None:
        with pytest.raises(ValueError):
            Sink(io.BytesIO(), stall_limit=0)
