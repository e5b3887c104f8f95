"""Structural events produced by the parser, in document order."""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class EventKind(Enum):
    OBJECT_START = "object_start"
    OBJECT_END = "object_end"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    KEY = "key"
    SCALAR = "scalar"


class ScalarKind(Enum):
    STRING = "string"
    NUMBER = "number"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"


class Event(NamedTuple):
    """One parser event.

    ``text`` is the decoded key for KEY events; for SCALAR events it is the
    decoded value of a string or the original literal text of anything else.
    """

    kind: EventKind
    text: str = ""
    scalar: ScalarKind | None = None


OBJECT_START = Event(EventKind.OBJECT_START)
OBJECT_END = Event(EventKind.OBJECT_END)
ARRAY_START = Event(EventKind.ARRAY_START)
ARRAY_END = Event(EventKind.ARRAY_END)


def key(name: str) -> Event:
    return Event(EventKind.KEY, name)


def scalar(kind: ScalarKind, text: str) -> Event:
    return Event(EventKind.SCALAR, text, kind)
