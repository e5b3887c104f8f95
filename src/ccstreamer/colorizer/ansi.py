"""ANSI SGR helpers."""
from __future__ import annotations

import re

RESET = "\x1b[0m"

_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")


def sgr(code: int) -> str:
    """Return the escape sequence that selects SGR ``code``."""
    return f"\x1b[{code}m"


def wrap(text: str, code: int) -> str:
    return f"\x1b[{code}m{text}{RESET}"


def contains_ansi(text: str) -> bool:
    return "\x1b[" in text


def strip_ansi(text: str) -> str:
    """Remove SGR sequences, leaving the visible text."""
    return _SGR_RE.sub("", text)


def display_width(text: str) -> int:
    """Length of ``text`` as shown on a terminal (escape sequences excluded)."""
    return len(strip_ansi(text))


def rich_color(code: int) -> str:
    """Translate an SGR foreground code into a rich color name.

    Codes 30-37 and 90-97 map onto the 16 standard terminal colors; anything
    else (attributes such as dim) falls back to the terminal default.
    """
    if 30 <= code <= 37:
        return f"color({code - 30})"
    if 90 <= code <= 97:
        return f"color({code - 90 + 8})"
    return "default"
