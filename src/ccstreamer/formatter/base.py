"""Renderer protocol: every output mode implements it."""
from __future__ import annotations

from typing import Iterable, Iterator, Protocol, runtime_checkable

from ..colorizer.engine import ColorEngine
from ..parser.events import Event


@runtime_checkable
class Renderer(Protocol):
    """Turns the events of one line into text; duck-typed, no inheritance required."""

    last_type: str | None

    def render(self, events: Iterable[Event]) -> Iterator[str]:
        """Yield text chunks for one top-level value, ending with a newline."""
        ...

    @property
    def engine(self) -> ColorEngine:
        """Color engine used for type and token colors."""
        ...
