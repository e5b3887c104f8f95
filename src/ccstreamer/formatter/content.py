"""Message content mode: show what a message says instead of its JSON.

Each line is reduced to its ``message.content``, literal escape sequences in
the text are turned into the characters they stand for, and a short type
indicator is put in front::

    {"type":"tool_use","message":{"content":"ls -la\\nexit"}}

    [TOOL] ls -la
    exit

Lines without ``message.content`` fall back to the first of a few common
fields (``text``, ``data``, ...) and finally to a one-line metadata summary.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator

from ..colorizer.engine import ColorEngine
from ..colorizer.scheme import Role
from ..parser.events import Event
from ..parser.values import build_value

FALLBACK_FIELDS = ("text", "data", "body", "value", "result")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
}
_ESCAPE_SEQ_RE = re.compile(
    r"\\(?:u([dD][89abAB][0-9a-fA-F]{2})\\u([dD][c-fC-F][0-9a-fA-F]{2})"
    r"|u([0-9a-fA-F]{4})"
    r"|(.))",
    re.DOTALL,
)
_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def _unescape(match: re.Match[str]) -> str:
    high, low, code, char = match.groups()
    if high is not None:
        point = 0x10000 + ((int(high, 16) - 0xD800) << 10) + (int(low, 16) - 0xDC00)
        return chr(point)
    if code is not None:
        value = int(code, 16)
        return "\ufffd" if 0xD800 <= value <= 0xDFFF else chr(value)
    # Unknown escapes are kept as written
    return _SIMPLE_ESCAPES.get(char, match.group())


def render_escapes(text: str) -> str:
    """Replace literal escape sequences (``\\n``, ``\\u00e9``...) with characters."""
    if "\\" not in text:
        return text
    return _ESCAPE_SEQ_RE.sub(_unescape, text)


class ContentKind(Enum):
    TEXT = "text"
    JSON = "json"
    METADATA = "metadata"
    EMPTY = "empty"


@dataclass(frozen=True)
class Extraction:
    """Displayable content pulled out of one message."""

    content: str
    kind: ContentKind
    fallback_used: bool = False
    message_type: str | None = None


def _compact(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _block_text(item: Any, unescape: bool) -> str:
    if isinstance(item, str):
        return render_escapes(item) if unescape else item
    if isinstance(item, dict) and isinstance(item.get("text"), str):
        return render_escapes(item["text"]) if unescape else item["text"]
    return _compact(item)


def _content_of(value: Any, indent_width: int, unescape: bool) -> tuple[str, ContentKind]:
    if isinstance(value, str):
        return (render_escapes(value) if unescape else value), ContentKind.TEXT
    if isinstance(value, list):
        return "\n".join(_block_text(item, unescape) for item in value), ContentKind.TEXT
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, indent=indent_width), ContentKind.JSON
    return _compact(value), ContentKind.TEXT


def _metadata(message: dict[str, Any], message_type: str | None) -> str:
    parts = []
    if message_type is not None:
        parts.append(f"[{message_type}]")
    timestamp = message.get("timestamp")
    if isinstance(timestamp, str):
        parts.append(f"at {timestamp}")
    if not parts:
        parts.append(f"[{len(message)} fields]")
    return " ".join(parts)


def extract_content(
    value: Any,
    discriminator: str = "type",
    indent_width: int = 2,
    unescape: bool = True,
) -> Extraction:
    """Pick the displayable content of one parsed message.

    Lookup order for objects: ``message.content``, a string ``message``, the
    first non-null field in :data:`FALLBACK_FIELDS`, then a metadata summary.
    An array stands for its first element.
    """
    if isinstance(value, list):
        if not value:
            return Extraction("", ContentKind.EMPTY, fallback_used=True)
        return extract_content(value[0], discriminator, indent_width, unescape)
    if isinstance(value, str):
        return Extraction(render_escapes(value) if unescape else value, ContentKind.TEXT)
    if not isinstance(value, dict):
        return Extraction("", ContentKind.EMPTY, fallback_used=True)

    tag = value.get(discriminator)
    message_type = tag if isinstance(tag, str) else None
    message = value.get("message")
    if isinstance(message, dict) and "content" in message:
        content, kind = _content_of(message["content"], indent_width, unescape)
        return Extraction(content, kind, message_type=message_type)
    if isinstance(message, str):
        return Extraction(render_escapes(message) if unescape else message, ContentKind.TEXT, message_type=message_type)

    for name in FALLBACK_FIELDS:
        field_value = value.get(name)
        if field_value is None:
            continue
        content, kind = _content_of(field_value, indent_width, unescape)
        return Extraction(content, kind, fallback_used=True, message_type=message_type)

    return Extraction(_metadata(value, message_type), ContentKind.METADATA, True, message_type)


@dataclass(frozen=True)
class TypeStyle:
    """How a message type is presented.

    ``label`` is printed before the content. ``role`` fixes the label color;
    without one the label (or, with no label, the content) gets the type color.
    ``muted`` dims the whole message instead.
    """

    label: str | None = None
    role: Role | None = None
    muted: bool = False


TYPE_STYLES: dict[str, TypeStyle] = {
    "text": TypeStyle(),
    "assistant": TypeStyle(),
    "tool_use": TypeStyle(label="[TOOL]"),
    "tool_result": TypeStyle(label="[RESULT]"),
    "error": TypeStyle(label="[ERROR]", role=Role.ERROR),
    "status": TypeStyle(muted=True),
    "thinking": TypeStyle(muted=True),
}


def style_for(message_type: str) -> TypeStyle:
    """Registered style for ``message_type``, or an upper-cased indicator."""
    return TYPE_STYLES.get(message_type) or TypeStyle(label=f"[{message_type.upper()}]")


class ContentRenderer:
    """Render each line as its message content with a type indicator.

    Args:
        engine:         Color engine; type indicators use its per-type colors.
        indent_width:   Indent for content that is itself a JSON object.
        discriminator:  Top-level key holding the message type.
        unescape:       Turn literal escape sequences into characters.
    """

    def __init__(
        self,
        engine: ColorEngine,
        indent_width: int = 2,
        discriminator: str = "type",
        unescape: bool = True,
    ) -> None:
        if indent_width < 1:
            raise ValueError("indent_width must be a positive integer")
        self._engine = engine
        self.indent_width = indent_width
        self.discriminator = discriminator
        self.unescape = unescape
        self.last_type: str | None = None

    @property
    def engine(self) -> ColorEngine:
        return self._engine

    def render(self, events: Iterable[Event]) -> Iterator[str]:
        """Yield the rendered message once the whole line has parsed."""
        self.last_type = None
        value = build_value(events)
        extraction = extract_content(value, self.discriminator, self.indent_width, self.unescape)
        self.last_type = extraction.message_type
        yield self.format(extraction) + "\n"

    def format(self, extraction: Extraction) -> str:
        # Lone surrogates cannot be written as UTF-8
        content = _SURROGATE_RE.sub("\ufffd", extraction.content)
        message_type = extraction.message_type
        if message_type is None:
            return content

        style = style_for(message_type)
        label = style.label
        if extraction.kind is ContentKind.METADATA:
            # The summary already names the type
            label = None
        elif extraction.fallback_used:
            label = f"[{message_type}]"

        if style.muted:
            return self._join(self._paint(label, Role.MUTED), self._paint(content, Role.MUTED))
        if style.role is not None:
            return self._join(self._paint(label, style.role), content)

        color = self._engine.color_for(message_type)
        if label is None:
            return self._engine.paint_color(content, color) if content else content
        return self._join(self._engine.paint_color(label, color), content)

    def _paint(self, text: str | None, role: Role) -> str | None:
        if not text:
            return text
        return self._engine.paint(text, role)

    @staticmethod
    def _join(label: str | None, content: str | None) -> str:
        if not label:
            return content or ""
        return f"{label} {content}" if content else label
