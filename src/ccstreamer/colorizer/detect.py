"""Decide whether output should be colorized.

Precedence (first match wins):
  1. NO_COLOR set to a non-empty value  -> disabled
  2. FORCE_COLOR set (anything but "" / "0") -> enabled
  3. the output stream is a terminal    -> enabled, otherwise disabled
"""
from __future__ import annotations

from typing import IO, Any


def stream_is_tty(stream: IO[Any] | None) -> bool:
    if stream is None:
        return False
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        # Closed or detached streams
        return False


def color_enabled(
    no_color: str | None,
    force_color: str | None,
    stream: IO[Any] | None,
) -> bool:
    if no_color:
        return False
    if force_color is not None and force_color not in ("", "0"):
        return True
    return stream_is_tty(stream)
