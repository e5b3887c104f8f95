"""Color engine: per-type color assignment plus ANSI wrapping of tokens.

A message's discriminator (its top-level ``type`` value) is mapped to a
color drawn from a bounded pool. Assignments are stable while the type keeps
its slot; when the pool is exhausted the oldest assignment is recycled to
the newcomer and its previous owner is forgotten.

Usage::

    engine = ColorEngine(enabled=True)
    engine.color_for("user")        # Color(code=36, name='cyan')
    engine.color_for("user")        # same Color again
    engine.paint('"text"', Role.KEY)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .ansi import wrap
from .palette import DEFAULT_PALETTE, Color
from .pool import ColorPool
from .scheme import ColorScheme, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorStats:
    total_types: int
    colors_available: int
    colors_in_use: int
    enabled: bool


class ColorEngine:
    """Assign colors to message types and colorize rendered tokens.

    Args:
        enabled: Whether any ANSI sequences are produced. Resolved once by
                 the caller (see :func:`ccstreamer.colorizer.detect.color_enabled`).
        palette: Colors available for per-type assignment.
        scheme:  Colors for token roles (keys, strings, structure...).
    """

    def __init__(
        self,
        enabled: bool,
        palette: Sequence[Color] = DEFAULT_PALETTE,
        scheme: ColorScheme | None = None,
    ) -> None:
        self._enabled = enabled
        self._pool = ColorPool(palette)
        self._scheme = scheme or ColorScheme.default()
        self._types: dict[str, int] = {}
        self._owners: dict[int, str] = {}
        # (type, slot, previous owner) per assignment since begin_line()
        self._journal: list[tuple[str, int, str | None]] | None = None

    # ------------------------------------------------------------------
    # Enablement
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    @property
    def scheme(self) -> ColorScheme:
        return self._scheme

    # ------------------------------------------------------------------
    # Type assignment
    # ------------------------------------------------------------------

    def color_for(self, type_name: str) -> Color | None:
        """Return the color for ``type_name``, assigning one if needed.

        Returns None when coloring is disabled.
        """
        if not self._enabled:
            return None
        slot = self._types.get(type_name)
        if slot is not None:
            return self._pool.color(slot)

        slot, recycled = self._pool.acquire()
        previous = None
        if recycled:
            previous = self._owners.pop(slot)
            del self._types[previous]
            logger.debug(
                "Color pool exhausted: %s recycled from %r to %r",
                self._pool.color(slot).name, previous, type_name,
            )
        self._types[type_name] = slot
        self._owners[slot] = type_name
        if self._journal is not None:
            self._journal.append((type_name, slot, previous))
        return self._pool.color(slot)

    # ------------------------------------------------------------------
    # Per-line transactions
    # ------------------------------------------------------------------

    def begin_line(self) -> None:
        """Start recording assignments so they can be rolled back."""
        self._journal = []

    def commit_line(self) -> None:
        """Keep every assignment made since :meth:`begin_line`."""
        self._journal = None

    def rollback_line(self) -> int:
        """Undo assignments made since :meth:`begin_line`.

        Recycled slots go back to their previous owners and the pool order is
        restored. Returns the number of assignments undone.
        """
        journal, self._journal = self._journal or [], None
        for type_name, slot, previous in reversed(journal):
            del self._types[type_name]
            self._pool.undo_acquire(slot, recycled=previous is not None)
            if previous is None:
                del self._owners[slot]
            else:
                self._owners[slot] = previous
                self._types[previous] = slot
        if journal:
            logger.debug("Rolled back %d color assignment(s)", len(journal))
        return len(journal)

    def assigned(self, type_name: str) -> Color | None:
        """Look up an existing assignment without creating one."""
        slot = self._types.get(type_name)
        return None if slot is None else self._pool.color(slot)

    def reset(self) -> None:
        """Release every assignment."""
        self._pool.release_all()
        self._types.clear()
        self._owners.clear()
        self._journal = None

    def recycle_inactive(self, active_type_names: Iterable[str]) -> int:
        """Release assignments for types not in ``active_type_names``.

        Returns the number of assignments released.
        """
        active = set(active_type_names)
        stale = [name for name in self._types if name not in active]
        for name in stale:
            slot = self._types.pop(name)
            del self._owners[slot]
            self._pool.release(slot)
        if stale:
            logger.debug("Released %d inactive type color(s)", len(stale))
        return len(stale)

    def stats(self) -> ColorStats:
        return ColorStats(
            total_types=len(self._types),
            colors_available=self._pool.available_count,
            colors_in_use=self._pool.in_use_count,
            enabled=self._enabled,
        )

    @property
    def pool(self) -> ColorPool:
        return self._pool

    # ------------------------------------------------------------------
    # Wrapping
    # ------------------------------------------------------------------

    def paint(self, text: str, role: Role) -> str:
        if not self._enabled:
            return text
        return wrap(text, self._scheme.code_for(role))

    def paint_color(self, text: str, color: Color | None) -> str:
        if not self._enabled or color is None:
            return text
        return wrap(text, color.code)
