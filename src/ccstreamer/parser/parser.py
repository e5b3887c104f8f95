"""Streaming JSON parser: validates one line and yields structural events.

The parser is an explicit state machine over a stack of open containers
rather than a recursive descent, so deeply nested input can neither exhaust
the interpreter's call stack nor run past ``max_depth``.

Usage::

    parser = JsonParser(ParserConfig(max_depth=64))
    for event in parser.events(b'{"type": "user", "ok": true}'):
        ...

Events are produced lazily: a syntax error late in the line surfaces as a
:class:`~ccstreamer.errors.ParseError` only once iteration reaches it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from ..errors import DepthLimitError, ParseError
from . import events as ev
from .events import Event, ScalarKind
from .tokenizer import Token, TokenKind, Tokenizer

_SCALARS = {
    TokenKind.STRING: ScalarKind.STRING,
    TokenKind.NUMBER: ScalarKind.NUMBER,
    TokenKind.TRUE: ScalarKind.TRUE,
    TokenKind.FALSE: ScalarKind.FALSE,
    TokenKind.NULL: ScalarKind.NULL,
}

_WHITESPACE = b" \t\r\n"


class ContainerKind(Enum):
    OBJECT = "object"
    ARRAY = "array"


_CLOSERS = {
    ContainerKind.OBJECT: (TokenKind.RBRACE, ev.OBJECT_END),
    ContainerKind.ARRAY: (TokenKind.RBRACKET, ev.ARRAY_END),
}


class _Expect(Enum):
    VALUE = "value"
    FIRST_KEY = "first_key"
    KEY = "key"
    FIRST_ITEM = "first_item"
    AFTER_VALUE = "after_value"


@dataclass
class ParserConfig:
    """Parser limits and options.

    Attributes:
        max_depth:            Maximum number of simultaneously open containers.
        allow_duplicate_keys: When False, a repeated key within one object is
                              a parse error.
    """

    max_depth: int = 1000
    allow_duplicate_keys: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")


@dataclass
class ParserState:
    """Open containers for the line being parsed (cursor lives in the tokenizer)."""

    tokenizer: Tokenizer
    stack: list[ContainerKind] = field(default_factory=list)
    seen_keys: list[set[str] | None] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.stack)


def is_blank(data: bytes) -> bool:
    """True for lines that hold nothing but whitespace."""
    return not data.strip(_WHITESPACE)


def _unexpected(token: Token, expected: str) -> ParseError:
    return ParseError(token.offset, f"unexpected {token.kind.value}, expected {expected}")


class JsonParser:
    """Validate a single JSON value and emit its events in document order."""

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or ParserConfig()

    def _open(self, state: ParserState, kind: ContainerKind, token: Token) -> None:
        if state.depth >= self.config.max_depth:
            raise DepthLimitError(
                token.offset,
                f"nesting depth exceeds the maximum of {self.config.max_depth}",
            )
        state.stack.append(kind)
        track = kind is ContainerKind.OBJECT and not self.config.allow_duplicate_keys
        state.seen_keys.append(set() if track else None)

    def _close(self, state: ParserState) -> Event:
        kind = state.stack.pop()
        state.seen_keys.pop()
        return _CLOSERS[kind][1]

    def _check_key(self, state: ParserState, token: Token) -> None:
        seen = state.seen_keys[-1]
        if seen is None:
            return
        if token.text in seen:
            raise ParseError(token.offset, f"duplicate key {token.text!r}")
        seen.add(token.text)

    def events(self, data: bytes) -> Iterator[Event]:
        """Yield the events of the single JSON value held in ``data``.

        Raises ParseError (possibly mid-iteration) for malformed input,
        trailing content after the value, or nesting beyond ``max_depth``.
        """
        tokens = Tokenizer(data)
        state = ParserState(tokens)
        expect = _Expect.VALUE

        while True:
            if expect is _Expect.VALUE:
                token = tokens.next_token()
                if token.kind is TokenKind.LBRACE:
                    self._open(state, ContainerKind.OBJECT, token)
                    yield ev.OBJECT_START
                    expect = _Expect.FIRST_KEY
                elif token.kind is TokenKind.LBRACKET:
                    self._open(state, ContainerKind.ARRAY, token)
                    yield ev.ARRAY_START
                    expect = _Expect.FIRST_ITEM
                elif token.kind in _SCALARS:
                    yield ev.scalar(_SCALARS[token.kind], token.text)
                    expect = _Expect.AFTER_VALUE
                else:
                    raise _unexpected(token, "a value")

            elif expect is _Expect.FIRST_KEY or expect is _Expect.KEY:
                token = tokens.next_token()
                if token.kind is TokenKind.STRING:
                    self._check_key(state, token)
                    colon = tokens.next_token()
                    if colon.kind is not TokenKind.COLON:
                        raise _unexpected(colon, "':'")
                    yield ev.key(token.text)
                    expect = _Expect.VALUE
                elif token.kind is TokenKind.RBRACE and expect is _Expect.FIRST_KEY:
                    yield self._close(state)
                    expect = _Expect.AFTER_VALUE
                elif expect is _Expect.FIRST_KEY:
                    raise _unexpected(token, "a string key or '}'")
                else:
                    raise _unexpected(token, "a string key")

            elif expect is _Expect.FIRST_ITEM:
                if tokens.peek_token().kind is TokenKind.RBRACKET:
                    tokens.next_token()
                    yield self._close(state)
                    expect = _Expect.AFTER_VALUE
                else:
                    expect = _Expect.VALUE

            else:
                token = tokens.next_token()
                if not state.stack:
                    if token.kind is TokenKind.EOF:
                        return
                    raise ParseError(token.offset, "unexpected trailing content after the value")
                top = state.stack[-1]
                closer = _CLOSERS[top][0]
                if token.kind is TokenKind.COMMA:
                    expect = _Expect.KEY if top is ContainerKind.OBJECT else _Expect.VALUE
                elif token.kind is closer:
                    yield self._close(state)
                else:
                    raise _unexpected(token, f"',' or {closer.value}")

    def parse(self, data: bytes) -> list[Event]:
        """Parse eagerly and return every event."""
        return list(self.events(data))
