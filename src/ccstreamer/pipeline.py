"""Line-at-a-time processing loop: read, parse, format, colorize, write.

Each line is rendered and written to completion before the next one is
read. A malformed line is reported and skipped; an I/O failure ends the run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .colorizer.engine import ColorEngine
from .config import RenderConfig
from .errors import ExitCode, ParseError
from .formatter.base import Renderer
from .formatter.content import ContentRenderer
from .formatter.printer import PrettyPrinter
from .parser.parser import JsonParser, ParserConfig, is_blank
from .stream.sink import Sink

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[int, ParseError], None]


@dataclass
class RenderedLine:
    """Outcome of one input line."""

    line_no: int
    text: str = ""
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    lines_read: int = 0
    rendered: int = 0
    failed: int = 0
    skipped: int = 0
    interrupted: bool = False
    failures: list[tuple[int, ParseError]] = field(default_factory=list, repr=False)

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.PARSE_ERROR if self.failed else ExitCode.OK


class Pipeline:
    """Drive lines through parser, printer and sink.

    Args:
        parser:        Validates each line and produces events.
        printer:       Turns events into text (JSON layout or message content);
                       owns the color engine.
        sink:          Receives rendered text; flushed once per line.
        on_error:      Called with (line number, error) for every bad line.
        recycle_every: Every N rendered lines, release the colors of types
                       not seen during that window (0 disables).
    """

    def __init__(
        self,
        parser: JsonParser,
        printer: Renderer,
        sink: Sink,
        on_error: ErrorReporter | None = None,
        recycle_every: int = 0,
    ) -> None:
        if recycle_every < 0:
            raise ValueError("recycle_every must not be negative")
        self._parser = parser
        self._printer = printer
        self._sink = sink
        self._on_error = on_error
        self._recycle_every = recycle_every
        self._window_types: set[str] = set()
        self._window_lines = 0

    @property
    def printer(self) -> Renderer:
        return self._printer

    def process_line(self, line_no: int, data: bytes) -> RenderedLine | None:
        """Render one line into the sink. Returns None for blank lines."""
        if is_blank(data):
            return None
        engine = self._printer.engine
        engine.begin_line()
        try:
            for chunk in self._printer.render(self._parser.events(data)):
                self._sink.write(chunk)
        except ParseError as exc:
            self._sink.discard()
            engine.rollback_line()
            logger.debug("line %d rejected: %s", line_no, exc)
            if self._on_error is not None:
                self._on_error(line_no, exc)
            return RenderedLine(line_no, error=exc)
        except BaseException:
            # Interrupted mid-line: never emit half a rendering
            self._sink.discard()
            engine.rollback_line()
            raise
        engine.commit_line()
        text = self._sink.commit()
        self._track_type(self._printer.last_type)
        return RenderedLine(line_no, text)

    def _track_type(self, type_name: str | None) -> None:
        if not self._recycle_every:
            return
        if type_name is not None:
            self._window_types.add(type_name)
        self._window_lines += 1
        if self._window_lines >= self._recycle_every:
            self._printer.engine.recycle_inactive(self._window_types)
            self._window_types = set()
            self._window_lines = 0

    def run(self, lines: Iterable[bytes]) -> RunSummary:
        """Process every line in order.

        StreamIOError propagates to the caller. KeyboardInterrupt stops the
        run cleanly: committed output is flushed and the summary is marked
        interrupted.
        """
        summary = RunSummary()
        try:
            for line_no, data in enumerate(lines, start=1):
                summary.lines_read = line_no
                result = self.process_line(line_no, data)
                if result is None:
                    summary.skipped += 1
                elif result.ok:
                    summary.rendered += 1
                else:
                    summary.failed += 1
                    summary.failures.append((line_no, result.error))  # type: ignore[arg-type]
        except KeyboardInterrupt:
            logger.debug("Interrupted after %d line(s)", summary.lines_read)
            summary.interrupted = True
            self._sink.discard()
            self._sink.flush()
        return summary


def build_pipeline(
    config: RenderConfig,
    sink: Sink,
    on_error: ErrorReporter | None = None,
) -> Pipeline:
    """Wire parser, color engine and printer from a resolved configuration."""
    engine = ColorEngine(config.enabled, palette=config.palette, scheme=config.scheme)
    renderer_cls = ContentRenderer if config.mode == "content" else PrettyPrinter
    printer: Renderer = renderer_cls(
        engine,
        indent_width=config.indent_width,
        discriminator=config.discriminator,
    )
    parser = JsonParser(
        ParserConfig(
            max_depth=config.max_depth,
            allow_duplicate_keys=config.allow_duplicate_keys,
        )
    )
    return Pipeline(parser, printer, sink, on_error=on_error, recycle_every=config.recycle_every)
