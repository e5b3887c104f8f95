"""Configuration via pydantic-settings: resolved once at startup.

Environment variables (``CCSTREAMER_`` prefix, or a ``.env`` file):

    CCSTREAMER_INDENT          spaces per indent level (default 2)
    CCSTREAMER_MAX_DEPTH       maximum nesting depth (default 1000)
    CCSTREAMER_PALETTE         custom type palette, e.g. "bright_blue,92,cyan"
    CCSTREAMER_SCHEME          token colors: default | high-contrast
    CCSTREAMER_RECYCLE_EVERY   release idle type colors every N lines (0 = off)
    CCSTREAMER_ALLOW_DUPLICATE_KEYS
    CCSTREAMER_DISCRIMINATOR   top-level key that selects the type color
    CCSTREAMER_MODE            json (pretty-print, default) | content (message text)

plus the conventional, unprefixed ``NO_COLOR`` and ``FORCE_COLOR``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .colorizer.detect import color_enabled
from .colorizer.palette import DEFAULT_PALETTE, Color, parse_palette
from .colorizer.scheme import SCHEME_NAMES, ColorScheme

MODES = ("json", "content")


class Settings(BaseSettings):
    """ccstreamer configuration, loaded from env vars / .env file."""

    indent: int = Field(default=2, ge=1, description="Spaces per indent level")
    max_depth: int = Field(default=1000, ge=1, description="Maximum nesting depth per line")
    palette: str = Field(default="", description="Comma-separated type palette (names or SGR codes)")
    scheme: str = Field(default="default", description="Token color scheme")
    recycle_every: int = Field(default=0, ge=0, description="Release idle type colors every N lines")
    allow_duplicate_keys: bool = Field(default=True, description="Accept repeated keys in one object")
    discriminator: str = Field(default="type", description="Top-level key holding the message type")
    mode: str = Field(default="json", description="Output mode: json or content")
    no_color: str | None = Field(default=None, validation_alias="NO_COLOR")
    force_color: str | None = Field(default=None, validation_alias="FORCE_COLOR")

    class Config:
        env_prefix = "CCSTREAMER_"
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    @field_validator("palette")
    @classmethod
    def _check_palette(cls, value: str) -> str:
        if value.strip():
            parse_palette(value)
        return value

    @field_validator("scheme")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        if value not in SCHEME_NAMES:
            raise ValueError(f"must be one of: {', '.join(SCHEME_NAMES)}")
        return value

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in MODES:
            raise ValueError(f"must be one of: {', '.join(MODES)}")
        return value


def load_settings() -> Settings:
    """Read the environment. Raises pydantic.ValidationError on bad values."""
    return Settings()


@dataclass(frozen=True)
class RenderConfig:
    """Fully resolved settings consumed by the processing core."""

    enabled: bool
    indent_width: int = 2
    palette: tuple[Color, ...] = DEFAULT_PALETTE
    scheme: ColorScheme = field(default_factory=ColorScheme.default)
    max_depth: int = 1000
    allow_duplicate_keys: bool = True
    recycle_every: int = 0
    discriminator: str = "type"
    mode: str = "json"


def resolve_render_config(
    settings: Settings,
    stream: IO[Any] | None,
    *,
    color: bool | None = None,
    indent: int | None = None,
    palette: str | None = None,
    scheme: str | None = None,
    max_depth: int | None = None,
    recycle_every: int | None = None,
    strict_keys: bool = False,
    mode: str | None = None,
) -> RenderConfig:
    """Merge command-line overrides (non-None arguments) over ``settings``.

    ``color=False`` acts like NO_COLOR and ``color=True`` like FORCE_COLOR;
    a disable signal from either source always wins.
    """
    no_color = "1" if color is False else settings.no_color
    force_color = "1" if color is True else settings.force_color
    palette_spec = palette if palette is not None else settings.palette
    return RenderConfig(
        enabled=color_enabled(no_color, force_color, stream),
        indent_width=indent if indent is not None else settings.indent,
        palette=parse_palette(palette_spec) if palette_spec.strip() else DEFAULT_PALETTE,
        scheme=ColorScheme.named(scheme or settings.scheme),
        max_depth=max_depth if max_depth is not None else settings.max_depth,
        allow_duplicate_keys=settings.allow_duplicate_keys and not strict_keys,
        recycle_every=recycle_every if recycle_every is not None else settings.recycle_every,
        discriminator=settings.discriminator,
        mode=mode or settings.mode,
    )
