"""Build Python values from parser events."""
from __future__ import annotations

from typing import Any, Iterable

from .events import Event, EventKind, ScalarKind

_LITERALS = {ScalarKind.TRUE: True, ScalarKind.FALSE: False, ScalarKind.NULL: None}


def number_value(text: str) -> int | float:
    if any(char in text for char in ".eE"):
        return float(text)
    return int(text)


def build_value(events: Iterable[Event]) -> Any:
    """Consume ``events`` for one top-level value and return it.

    Objects become dicts (a repeated key keeps its last value), arrays become
    lists. Parse errors raised by ``events`` propagate unchanged.
    """
    # Each frame: (container, key awaiting its value)
    stack: list[list[Any]] = []
    result: Any = None
    done = False

    for event in events:
        kind = event.kind
        if kind is EventKind.KEY:
            stack[-1][1] = event.text
            continue
        if kind is EventKind.OBJECT_START:
            stack.append([{}, None])
            continue
        if kind is EventKind.ARRAY_START:
            stack.append([[], None])
            continue
        if kind in (EventKind.OBJECT_END, EventKind.ARRAY_END):
            value = stack.pop()[0]
        elif event.scalar is ScalarKind.STRING:
            value = event.text
        elif event.scalar is ScalarKind.NUMBER:
            value = number_value(event.text)
        else:
            value = _LITERALS[event.scalar]

        if not stack:
            result = value
            done = True
            continue
        container, pending_key = stack[-1]
        if isinstance(container, dict):
            container[pending_key] = value
        else:
            container.append(value)

    if stack or not done:
        raise ValueError("event stream ended before the value was complete")
    return result
