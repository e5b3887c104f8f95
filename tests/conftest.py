"""Shared pytest fixtures for ccstreamer tests."""
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from ccstreamer.colorizer.engine import ColorEngine
from ccstreamer.formatter.printer import PrettyPrinter
from ccstreamer.parser.parser import JsonParser
from ccstreamer.pipeline import Pipeline
from ccstreamer.stream.sink import Sink

_ENV_VARS = (
    "NO_COLOR",
    "FORCE_COLOR",
    "CCSTREAMER_INDENT",
    "CCSTREAMER_MAX_DEPTH",
    "CCSTREAMER_PALETTE",
    "CCSTREAMER_SCHEME",
    "CCSTREAMER_RECYCLE_EVERY",
    "CCSTREAMER_ALLOW_DUPLICATE_KEYS",
    "CCSTREAMER_DISCRIMINATOR",
    "CCSTREAMER_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell settings out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def plain_engine() -> ColorEngine:
    return ColorEngine(enabled=False)


@pytest.fixture()
def color_engine() -> ColorEngine:
    return ColorEngine(enabled=True)


@pytest.fixture()
def render():
    """Return a helper that renders one line of bytes to text."""

    def _render(line: bytes | str, engine: ColorEngine | None = None, indent: int = 2) -> str:
        if isinstance(line, str):
            line = line.encode("utf-8")
        printer = PrettyPrinter(engine or ColorEngine(enabled=False), indent_width=indent)
        return "".join(printer.render(JsonParser().events(line)))

    return _render


@pytest.fixture()
def make_pipeline():
    """Return a factory producing (pipeline, output buffer, reported errors)."""

    def _make(engine: ColorEngine | None = None, recycle_every: int = 0, parser: JsonParser | None = None):
        out = io.BytesIO()
        errors: list[tuple[int, Exception]] = []
        pipeline = Pipeline(
            parser or JsonParser(),
            PrettyPrinter(engine or ColorEngine(enabled=False)),
            Sink(out),
            on_error=lambda line_no, exc: errors.append((line_no, exc)),
            recycle_every=recycle_every,
        )
        return pipeline, out, errors

    return _make


@pytest.fixture()
def message_lines() -> list[str]:
    return [
        json.dumps({"type": "system", "subtype": "init", "tools": ["Bash", "Read"]}),
        json.dumps({"type": "user", "message": {"role": "user", "content": [{"type": "text", "text": "Hello"}]}}),
        json.dumps({"type": "assistant", "message": {"content": [{"type": "text", "text": "Hi!"}]}}),
        json.dumps({"type": "result", "is_error": False, "duration_ms": 1520, "cost": None}),
    ]


@pytest.fixture()
def tmp_jsonl_file(tmp_path: Path):
    """Return a factory that writes lines to a temporary .jsonl file."""

    def _make(lines: list[str], name: str = "events.jsonl") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    return _make
