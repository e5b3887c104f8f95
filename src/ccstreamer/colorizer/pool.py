"""Fixed-capacity color pool.

The palette is an arena of slots. A slot index lives in exactly one of two
containers at all times:

* ``available``: a stack; new assignments pop from its end.
* ``in_use``: a FIFO queue in assignment order, oldest at the front.

When ``available`` runs dry the oldest in-use slot is recycled: it moves to
the back of the queue and is handed out again.
"""
from __future__ import annotations

from collections import deque
from typing import Sequence

from .palette import Color


class ColorPool:
    def __init__(self, palette: Sequence[Color]) -> None:
        if not palette:
            raise ValueError("palette must contain at least one color")
        self._colors: tuple[Color, ...] = tuple(palette)
        self._available: list[int] = list(range(len(self._colors)))
        self._in_use: deque[int] = deque()

    def acquire(self) -> tuple[int, bool]:
        """Take a slot for a new assignment.

        Returns ``(slot, recycled)``; ``recycled`` is True when the slot was
        taken from the oldest existing assignment.
        """
        if self._available:
            slot = self._available.pop()
            recycled = False
        else:
            slot = self._in_use.popleft()
            recycled = True
        self._in_use.append(slot)
        return slot, recycled

    def undo_acquire(self, slot: int, recycled: bool) -> None:
        """Reverse the most recent :meth:`acquire`, which returned ``slot``.

        Undoing several acquisitions must happen newest first.
        """
        if not self._in_use or self._in_use[-1] != slot:
            raise ValueError(f"slot {slot} is not the most recent acquisition")
        self._in_use.pop()
        if recycled:
            self._in_use.appendleft(slot)
        else:
            self._available.append(slot)

    def release(self, slot: int) -> None:
        """Return an in-use slot to the available stack."""
        self._in_use.remove(slot)
        self._available.append(slot)

    def release_all(self) -> None:
        while self._in_use:
            self._available.append(self._in_use.popleft())

    def color(self, slot: int) -> Color:
        return self._colors[slot]

    @property
    def capacity(self) -> int:
        return len(self._colors)

    @property
    def available_count(self) -> int:
        return len(self._available)

    @property
    def in_use_count(self) -> int:
        return len(self._in_use)

    def in_use_colors(self) -> list[Color]:
        """Colors currently assigned, oldest assignment first."""
        return [self._colors[slot] for slot in self._in_use]

    def __repr__(self) -> str:
        return f"ColorPool(available={len(self._available)}, in_use={len(self._in_use)})"
