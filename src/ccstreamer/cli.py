"""ccstreamer CLI: entry point.

Reads JSON Lines on stdin and writes each line pretty-printed (and, on a
terminal, colorized) to stdout as soon as it arrives.

    some-tool --output-format stream-json | ccstreamer
    ccstreamer --indent 4 --color always < events.jsonl | less -R

Exit codes:
    0  success
    1  general error (e.g. invalid environment configuration)
    2  at least one line failed to parse (the rest was still processed)
    3  I/O error reading input or writing output
    4  invalid command-line arguments
"""
from __future__ import annotations

import logging
import signal
import sys
from typing import Any, NoReturn

import click
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .colorizer.ansi import rich_color
from .colorizer.palette import parse_palette
from .colorizer.scheme import SCHEME_NAMES, ColorScheme, Role
from .config import load_settings, resolve_render_config
from .errors import ExitCode, PaletteError, ParseError, StreamIOError
from .pipeline import ErrorReporter, Pipeline, RunSummary, build_pipeline
from .stream.reader import LineReader
from .stream.sink import Sink

err_console = Console(stderr=True, highlight=False, soft_wrap=True)

_COLOR_CHOICES = {"auto": None, "always": True, "never": False}
# (--content, --json) -> mode; neither flag defers to CCSTREAMER_MODE
_MODE_FLAGS = {(True, False): "content", (False, True): "json"}

# ── Helpers ─────────────────────────────────────────────────────────────────


class _Command(click.Command):
    """click exits 2 on usage errors; 2 is reserved for parse errors here."""

    def make_context(self, info_name: str | None, args: list[str], parent: Any = None, **extra: Any) -> click.Context:
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as exc:
            exc.exit_code = int(ExitCode.USAGE)
            raise


def _validate_palette(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        parse_palette(value)
    except PaletteError as exc:
        raise click.BadParameter(str(exc)) from exc
    return value


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _error_prefix(scheme: ColorScheme) -> str:
    """``error:`` in rich markup, colored like the scheme's error role."""
    return f"[{rich_color(scheme.code_for(Role.ERROR))}]error:[/]"


def _parse_error_reporter(scheme: ColorScheme) -> ErrorReporter:
    prefix = _error_prefix(scheme)

    def report(line_no: int, exc: ParseError) -> None:
        err_console.print(f"{prefix} line {line_no}, byte {exc.offset}: {escape(exc.reason)}")

    return report


def _raise_interrupt(signum: int, frame: Any) -> NoReturn:
    raise KeyboardInterrupt


def _print_summary(summary: RunSummary, pipeline: Pipeline) -> None:
    colors = pipeline.printer.engine.stats()
    table = Table(title="ccstreamer summary", box=box.SIMPLE_HEAVY)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right", style="cyan")
    table.add_row("lines read", str(summary.lines_read))
    table.add_row("rendered", str(summary.rendered))
    table.add_row("failed", str(summary.failed))
    table.add_row("blank", str(summary.skipped))
    table.add_row("types colored", str(colors.total_types))
    table.add_row("colors in use", f"{colors.colors_in_use}/{colors.colors_in_use + colors.colors_available}")
    err_console.print(table)


# ── Command ──────────────────────────────────────────────────────────────────


@click.command(cls=_Command, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version="0.1.0", prog_name="ccstreamer")
@click.option(
    "--indent", "-i", type=click.IntRange(min=1), default=None,
    help="Spaces per indent level (env CCSTREAMER_INDENT, default 2).",
)
@click.option(
    "--color", "color", default="auto",
    type=click.Choice(list(_COLOR_CHOICES), case_sensitive=False),
    help="Colorize output. NO_COLOR in the environment always disables.",
    show_default=True,
)
@click.option(
    "--palette", default=None, callback=_validate_palette,
    help="Comma-separated colors for message types, e.g. 'bright_blue,92,cyan'.",
)
@click.option(
    "--scheme", default=None, type=click.Choice(SCHEME_NAMES),
    help="Token color scheme (env CCSTREAMER_SCHEME).",
)
@click.option(
    "--max-depth", type=click.IntRange(min=1), default=None,
    help="Maximum nesting depth per line (env CCSTREAMER_MAX_DEPTH, default 1000).",
)
@click.option(
    "--recycle-every", type=click.IntRange(min=0), default=None,
    help="Release colors of types unseen in the last N lines (0 = never).",
)
@click.option("--strict-keys", is_flag=True, help="Reject objects with duplicate keys.")
@click.option(
    "--content", "content_mode", is_flag=True,
    help="Show each message's content with a type indicator instead of JSON (env CCSTREAMER_MODE=content).",
)
@click.option("--json", "json_mode", is_flag=True, help="Pretty-print JSON even if CCSTREAMER_MODE=content.")
@click.option("--stats", "show_stats", is_flag=True, help="Print a summary table to stderr when done.")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
def main(
    indent: int | None,
    color: str,
    palette: str | None,
    scheme: str | None,
    max_depth: int | None,
    recycle_every: int | None,
    strict_keys: bool,
    content_mode: bool,
    json_mode: bool,
    show_stats: bool,
    verbose: bool,
) -> None:
    """Pretty-print a stream of JSON lines from stdin.

    Each input line must hold one complete JSON value. Malformed lines are
    reported on stderr with their line number and byte offset, and skipped.

    \b
    Examples:
      tail -f app.jsonl | ccstreamer
      ccstreamer --indent 4 < events.jsonl
      ccstreamer --content < session.jsonl
      NO_COLOR=1 ccstreamer < events.jsonl > pretty.txt
    """
    _configure_logging(verbose)

    if content_mode and json_mode:
        usage = click.UsageError("--content and --json cannot be combined")
        usage.exit_code = int(ExitCode.USAGE)
        raise usage

    try:
        settings = load_settings()
    except ValidationError as exc:
        prefix = _error_prefix(ColorScheme.default())
        err_console.print(f"{prefix} invalid configuration: {escape(str(exc))}")
        sys.exit(int(ExitCode.ERROR))

    config = resolve_render_config(
        settings,
        sys.stdout,
        color=_COLOR_CHOICES[color.lower()],
        indent=indent,
        palette=palette,
        scheme=scheme,
        max_depth=max_depth,
        recycle_every=recycle_every,
        strict_keys=strict_keys,
        mode=_MODE_FLAGS.get((content_mode, json_mode)),
    )

    sink = Sink(click.get_binary_stream("stdout"))
    pipeline = build_pipeline(config, sink, on_error=_parse_error_reporter(config.scheme))
    reader = LineReader(click.get_binary_stream("stdin"))

    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        summary = pipeline.run(reader.lines())
    except StreamIOError as exc:
        err_console.print(f"{_error_prefix(config.scheme)} {escape(str(exc))}")
        sys.exit(int(ExitCode.IO_ERROR))
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    if summary.interrupted:
        err_console.print("[dim]Stopped.[/dim]")
    if show_stats:
        _print_summary(summary, pipeline)
    sys.exit(int(summary.exit_code))


if __name__ == "__main__":
    main()
