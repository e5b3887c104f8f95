"""Named ANSI colors and the palette used for per-type assignment.

Red tones are reserved for error highlighting and never enter a palette.
"""
from __future__ import annotations

from dataclasses import dataclass

from ..errors import PaletteError


@dataclass(frozen=True)
class Color:
    """An ANSI foreground color: SGR code plus symbolic name."""

    code: int
    name: str

    def __str__(self) -> str:
        return self.name


NAMED_COLORS: dict[str, int] = {
    "bright_blue": 94,
    "bright_green": 92,
    "bright_yellow": 93,
    "bright_magenta": 95,
    "bright_cyan": 96,
    "white": 97,
    "blue": 34,
    "green": 32,
    "yellow": 33,
    "magenta": 35,
    "cyan": 36,
    "gray": 90,
    # Reserved for errors
    "red": 31,
    "bright_red": 91,
}

RESERVED_CODES = frozenset({31, 91})

_NAMES_BY_CODE = {code: name for name, code in NAMED_COLORS.items()}

DEFAULT_PALETTE: tuple[Color, ...] = tuple(
    Color(NAMED_COLORS[name], name)
    for name in (
        "bright_blue",
        "bright_green",
        "bright_yellow",
        "bright_magenta",
        "bright_cyan",
        "white",
        "blue",
        "green",
        "yellow",
        "magenta",
        "cyan",
    )
)


def color_named(name: str) -> Color:
    try:
        return Color(NAMED_COLORS[name], name)
    except KeyError:
        raise PaletteError(f"unknown color {name!r}") from None


def _parse_entry(entry: str) -> Color:
    if entry.isdigit():
        code = int(entry)
        if not (30 <= code <= 37 or 90 <= code <= 97):
            raise PaletteError(f"{code} is not an ANSI foreground color code")
        return Color(code, _NAMES_BY_CODE.get(code, f"ansi_{code}"))
    return color_named(entry.lower().replace("-", "_"))


def parse_palette(spec: str) -> tuple[Color, ...]:
    """Build a palette from a comma-separated list of color names or codes.

    >>> [c.code for c in parse_palette("bright_blue, 92")]
    [94, 92]
    """
    colors: list[Color] = []
    seen: set[int] = set()
    for raw in spec.split(","):
        entry = raw.strip()
        if not entry:
            continue
        color = _parse_entry(entry)
        if color.code in RESERVED_CODES:
            raise PaletteError(f"{color.name} is reserved for error highlighting")
        if color.code in seen:
            raise PaletteError(f"{color.name} appears more than once")
        seen.add(color.code)
        colors.append(color)
    if not colors:
        raise PaletteError("palette is empty")
    return tuple(colors)
