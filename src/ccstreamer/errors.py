"""Exception hierarchy and process exit codes."""
from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    ERROR = 1
    PARSE_ERROR = 2
    IO_ERROR = 3
    USAGE = 4


class CCStreamerError(Exception):
    """Base class for all ccstreamer errors."""


class ParseError(CCStreamerError):
    """A single line could not be parsed; recoverable, processing continues.

    Attributes:
        offset: 1-based byte offset of the fault within the line.
        reason: Human-readable description.
    """

    def __init__(self, offset: int, reason: str) -> None:
        super().__init__(f"byte {offset}: {reason}")
        self.offset = offset
        self.reason = reason


class DepthLimitError(ParseError):
    """Nesting exceeded the configured maximum depth."""


class StreamIOError(CCStreamerError):
    """Reading input or writing output failed (fatal)."""


class InputError(StreamIOError):
    pass


class OutputError(StreamIOError):
    pass


class PaletteError(ValueError):
    """A custom palette string could not be used."""
