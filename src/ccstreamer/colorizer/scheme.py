"""Role colors for JSON tokens."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .palette import NAMED_COLORS


class Role(Enum):
    KEY = "key"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    STRUCTURAL = "structural"
    ERROR = "error"
    MUTED = "muted"


@dataclass(frozen=True)
class ColorScheme:
    """SGR code per token role."""

    key: int = NAMED_COLORS["cyan"]
    string: int = NAMED_COLORS["green"]
    number: int = NAMED_COLORS["yellow"]
    boolean: int = NAMED_COLORS["magenta"]
    null: int = NAMED_COLORS["gray"]
    structural: int = 37
    error: int = NAMED_COLORS["red"]
    muted: int = 2  # dim

    @classmethod
    def default(cls) -> "ColorScheme":
        return cls()

    @classmethod
    def high_contrast(cls) -> "ColorScheme":
        return cls(
            key=NAMED_COLORS["bright_cyan"],
            string=NAMED_COLORS["bright_green"],
            number=NAMED_COLORS["bright_yellow"],
            boolean=NAMED_COLORS["bright_magenta"],
            null=NAMED_COLORS["gray"],
            structural=NAMED_COLORS["white"],
            error=NAMED_COLORS["bright_red"],
            muted=37,
        )

    @classmethod
    def named(cls, name: str) -> "ColorScheme":
        schemes = {"default": cls.default, "high-contrast": cls.high_contrast}
        try:
            return schemes[name]()
        except KeyError:
            raise ValueError(f"unknown color scheme {name!r}") from None

    def code_for(self, role: Role) -> int:
        return getattr(self, role.value)


SCHEME_NAMES = ("default", "high-contrast")
