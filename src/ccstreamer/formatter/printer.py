"""Streaming pretty-printer.

Consumes parser events and yields formatted text as each event arrives.
The only state is a stack of :class:`FormatterState` frames, one per open
container, so memory is bounded by nesting depth, not document size.

Layout matches ``json.dumps(value, indent=N, ensure_ascii=False)``::

    {
      "type": "user",
      "content": [
        1,
        2
      ],
      "empty": {}
    }
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from ..colorizer.engine import ColorEngine
from ..colorizer.scheme import Role
from ..parser.events import Event, EventKind, ScalarKind
from ..parser.parser import ContainerKind, JsonParser

_ESCAPE_RE = re.compile(r'["\\\x00-\x1f\ud800-\udfff]')
_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

_SCALAR_ROLES = {
    ScalarKind.STRING: Role.STRING,
    ScalarKind.NUMBER: Role.NUMBER,
    ScalarKind.TRUE: Role.BOOLEAN,
    ScalarKind.FALSE: Role.BOOLEAN,
    ScalarKind.NULL: Role.NULL,
}

_OPENERS = {
    EventKind.OBJECT_START: (ContainerKind.OBJECT, "{"),
    EventKind.ARRAY_START: (ContainerKind.ARRAY, "["),
}
_CLOSERS = {EventKind.OBJECT_END: "}", EventKind.ARRAY_END: "]"}


def _escape_char(match: re.Match[str]) -> str:
    char = match.group()
    return _ESCAPES.get(char) or f"\\u{ord(char):04x}"


def quote(text: str) -> str:
    """Render ``text`` as a canonical JSON string literal."""
    return '"' + _ESCAPE_RE.sub(_escape_char, text) + '"'


@dataclass
class FormatterState:
    """One open container: its kind, items emitted so far, and indent level."""

    kind: ContainerKind
    count: int
    indent: int


class PrettyPrinter:
    """Render event streams as indented, optionally colorized text.

    Args:
        engine:        Color engine consulted for every token.
        indent_width:  Spaces per indent level.
        discriminator: Top-level key whose string value selects the
                       per-type color.
    """

    def __init__(
        self,
        engine: ColorEngine,
        indent_width: int = 2,
        discriminator: str = "type",
    ) -> None:
        if indent_width < 1:
            raise ValueError("indent_width must be a positive integer")
        self._engine = engine
        self.indent_width = indent_width
        self.discriminator = discriminator
        self._unit = " " * indent_width
        self.last_type: str | None = None

    @property
    def engine(self) -> ColorEngine:
        return self._engine

    def _item_prefix(self, frame: FormatterState) -> str:
        prefix = self._engine.paint(",", Role.STRUCTURAL) + "\n" if frame.count else "\n"
        frame.count += 1
        return prefix + self._unit * (frame.indent + 1)

    def render(self, events: Iterable[Event]) -> Iterator[str]:
        """Yield text chunks for one top-level value, ending with a newline.

        Exceptions raised by ``events`` (parse failures) propagate unchanged;
        chunks already yielded belong to the failed line and must be dropped
        by the caller.
        """
        paint = self._engine.paint
        stack: list[FormatterState] = []
        discriminator_next = False
        self.last_type = None

        for event in events:
            kind = event.kind

            if kind is EventKind.KEY:
                frame = stack[-1]
                discriminator_next = len(stack) == 1 and event.text == self.discriminator
                yield (
                    self._item_prefix(frame)
                    + paint(quote(event.text), Role.KEY)
                    + paint(":", Role.STRUCTURAL)
                    + " "
                )
                continue

            if kind in _CLOSERS:
                frame = stack.pop()
                close = paint(_CLOSERS[kind], Role.STRUCTURAL)
                if frame.count:
                    yield "\n" + self._unit * frame.indent + close
                else:
                    yield close
            else:
                # A value: arrays place each element on its own line
                if stack and stack[-1].kind is ContainerKind.ARRAY:
                    yield self._item_prefix(stack[-1])
                if kind in _OPENERS:
                    container, token = _OPENERS[kind]
                    stack.append(FormatterState(container, 0, len(stack)))
                    yield paint(token, Role.STRUCTURAL)
                    discriminator_next = False
                    continue
                yield self._scalar(event, discriminator_next)
                discriminator_next = False

            if not stack:
                yield "\n"

        if stack:
            raise ValueError("event stream ended inside an open container")

    def _scalar(self, event: Event, is_discriminator: bool) -> str:
        if event.scalar is ScalarKind.STRING:
            text = quote(event.text)
            if is_discriminator:
                self.last_type = event.text
                color = self._engine.color_for(event.text)
                if color is not None:
                    return self._engine.paint_color(text, color)
            return self._engine.paint(text, Role.STRING)
        return self._engine.paint(event.text, _SCALAR_ROLES[event.scalar])


def format_document(
    data: str | bytes,
    indent_width: int = 2,
    engine: ColorEngine | None = None,
    parser: JsonParser | None = None,
) -> str:
    """Parse and pretty-print one complete JSON document.

    Newlines count as whitespace here, so already pretty-printed output can
    be formatted again.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    printer = PrettyPrinter(engine or ColorEngine(enabled=False), indent_width=indent_width)
    return "".join(printer.render((parser or JsonParser()).events(data)))
