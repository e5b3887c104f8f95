"""JSON tokenizer over the raw bytes of a single line.

Offsets are 1-based byte positions so diagnostics point at the exact byte a
user would count to in their input. Strings are decoded to their logical
value (escapes and surrogate pairs resolved); numbers keep their original
text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..errors import ParseError


class TokenKind(Enum):
    LBRACE = "'{'"
    RBRACE = "'}'"
    LBRACKET = "'['"
    RBRACKET = "']'"
    COMMA = "','"
    COLON = "':'"
    STRING = "string"
    NUMBER = "number"
    TRUE = "'true'"
    FALSE = "'false'"
    NULL = "'null'"
    EOF = "end of line"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int


_WHITESPACE = frozenset(b" \t\r\n")

_PUNCTUATION = {
    ord("{"): TokenKind.LBRACE,
    ord("}"): TokenKind.RBRACE,
    ord("["): TokenKind.LBRACKET,
    ord("]"): TokenKind.RBRACKET,
    ord(","): TokenKind.COMMA,
    ord(":"): TokenKind.COLON,
}

_KEYWORDS = {
    ord("t"): (b"true", TokenKind.TRUE),
    ord("f"): (b"false", TokenKind.FALSE),
    ord("n"): (b"null", TokenKind.NULL),
}

_SIMPLE_ESCAPES = {
    ord('"'): '"',
    ord("\\"): "\\",
    ord("/"): "/",
    ord("b"): "\b",
    ord("f"): "\f",
    ord("n"): "\n",
    ord("r"): "\r",
    ord("t"): "\t",
}

# RFC 8259 number grammar
_NUMBER_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
# Bytes that may not directly follow a complete number
_NUMBER_TAIL = frozenset(b"0123456789.eE+-")
# A run of string bytes that need no special handling
_PLAIN_RE = re.compile(rb'[^"\\\x00-\x1f]+')
_HEX4_RE = re.compile(rb"[0-9a-fA-F]{4}")
_IDENT_TAIL = frozenset(b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


def describe_byte(value: int) -> str:
    if 0x21 <= value <= 0x7E:
        return repr(chr(value))
    return f"byte 0x{value:02x}"


class Tokenizer:
    """Produce :class:`Token` objects one at a time from ``data``."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def position(self) -> int:
        """0-based index of the next unread byte."""
        return self._pos

    def _skip_whitespace(self) -> int:
        data = self._data
        pos = self._pos
        end = len(data)
        while pos < end and data[pos] in _WHITESPACE:
            pos += 1
        self._pos = pos
        return pos

    def next_token(self) -> Token:
        pos = self._skip_whitespace()
        data = self._data
        if pos >= len(data):
            return Token(TokenKind.EOF, "", len(data) + 1)

        byte = data[pos]
        kind = _PUNCTUATION.get(byte)
        if kind is not None:
            self._pos = pos + 1
            return Token(kind, chr(byte), pos + 1)
        if byte == 0x22:  # '"'
            return self._string(pos)
        if byte == 0x2D or 0x30 <= byte <= 0x39:  # '-' or digit
            return self._number(pos)
        keyword = _KEYWORDS.get(byte)
        if keyword is not None:
            return self._keyword(pos, *keyword)
        raise ParseError(pos + 1, f"unexpected character {describe_byte(byte)}")

    def peek_token(self) -> Token:
        saved = self._pos
        try:
            return self.next_token()
        finally:
            self._pos = saved

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _keyword(self, pos: int, word: bytes, kind: TokenKind) -> Token:
        data = self._data
        end = pos + len(word)
        if not data.startswith(word, pos) or (end < len(data) and data[end] in _IDENT_TAIL):
            raise ParseError(pos + 1, "invalid literal")
        self._pos = end
        return Token(kind, word.decode("ascii"), pos + 1)

    def _number(self, pos: int) -> Token:
        data = self._data
        m = _NUMBER_RE.match(data, pos)
        if m is None:
            raise ParseError(pos + 1, "invalid number")
        end = m.end()
        if end < len(data) and data[end] in _NUMBER_TAIL:
            raise ParseError(end + 1, "invalid number")
        self._pos = end
        return Token(TokenKind.NUMBER, m.group().decode("ascii"), pos + 1)

    def _string(self, start: int) -> Token:
        data = self._data
        end = len(data)
        parts: list[str] = []
        pos = start + 1
        while True:
            m = _PLAIN_RE.match(data, pos)
            if m is not None:
                try:
                    parts.append(m.group().decode("utf-8"))
                except UnicodeDecodeError as exc:
                    raise ParseError(pos + exc.start + 1, "invalid UTF-8 in string") from None
                pos = m.end()
            if pos >= end:
                raise ParseError(start + 1, "unterminated string")
            byte = data[pos]
            if byte == 0x22:
                self._pos = pos + 1
                return Token(TokenKind.STRING, "".join(parts), start + 1)
            if byte == 0x5C:
                pos = self._escape(pos, parts)
                continue
            raise ParseError(pos + 1, "unescaped control character in string")

    def _escape(self, pos: int, parts: list[str]) -> int:
        """Decode the escape sequence at ``pos`` (a backslash); return the next position."""
        data = self._data
        if pos + 1 >= len(data):
            raise ParseError(pos + 1, "unterminated string")
        marker = data[pos + 1]
        simple = _SIMPLE_ESCAPES.get(marker)
        if simple is not None:
            parts.append(simple)
            return pos + 2
        if marker != 0x75:  # 'u'
            raise ParseError(pos + 1, f"invalid escape sequence: {describe_byte(marker)} after backslash")

        code = self._hex4(pos + 2)
        pos += 6
        if 0xD800 <= code <= 0xDBFF and data.startswith(b"\\u", pos):
            low = self._hex4(pos + 2)
            if 0xDC00 <= low <= 0xDFFF:
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                pos += 6
        # Unpaired surrogates are kept as-is and re-escaped on output.
        parts.append(chr(code))
        return pos

    def _hex4(self, pos: int) -> int:
        m = _HEX4_RE.match(self._data, pos)
        if m is None:
            raise ParseError(pos + 1, "invalid unicode escape")
        return int(m.group(), 16)
