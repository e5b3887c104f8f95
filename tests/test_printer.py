"""Tests for the streaming pretty-printer."""
from __future__ import annotations

import json

import pytest

from ccstreamer.colorizer.ansi import contains_ansi, strip_ansi
from ccstreamer.colorizer.engine import ColorEngine
from ccstreamer.errors import ParseError
from ccstreamer.formatter.printer import PrettyPrinter, format_document, quote
from ccstreamer.parser import events as ev
from ccstreamer.parser.parser import JsonParser


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class TestLayout:
    def test_message_example(self, render) -> None:
        line = '{"type":"user","message":{"role":"user","content":[{"type":"text","text":"Hello"}]}}'
        assert render(line) == (
            "{\n"
            '  "type": "user",\n'
            '  "message": {\n'
            '    "role": "user",\n'
            '    "content": [\n'
            "      {\n"
            '        "type": "text",\n'
            '        "text": "Hello"\n'
            "      }\n"
            "    ]\n"
            "  }\n"
            "}\n"
        )

    @pytest.mark.parametrize("value", [
        {},
        [],
        {"a": {}, "b": [], "c": [[]], "d": [{}]},
        {"n": None, "t": True, "f": False, "i": -12, "x": 0.5},
        [1, [2, [3, [4]]]],
        {"text": 'quote " backslash \\ newline \n tab \t bell \x07'},
        {"unicode": "héllo ✓ 日本 \U0001F600", "slash": "a/b"},
        {"type": "result", "usage": {"input_tokens": 10, "output_tokens": 3}},
        "just a string",
        42,
        None,
    ])
    def test_matches_json_dumps(self, render, value) -> None:
        line = json.dumps(value, separators=(",", ":"))
        assert render(line) == json.dumps(value, indent=2, ensure_ascii=False) + "\n"

    def test_matches_json_dumps_with_indent_4(self, render, message_lines) -> None:
        for line in message_lines:
            expected = json.dumps(json.loads(line), indent=4, ensure_ascii=False) + "\n"
            assert render(line, indent=4) == expected

    def test_empty_containers_stay_on_one_line(self, render) -> None:
        assert render('{"a":{},"b":[]}') == '{\n  "a": {},\n  "b": []\n}\n'
        assert render("[]") == "[]\n"

    def test_number_text_is_preserved(self, render) -> None:
        assert render("[1.50,1E+2,-0,1e-7]") == "[\n  1.50,\n  1E+2,\n  -0,\n  1e-7\n]\n"

    def test_strings_are_re_escaped(self, render) -> None:
        line = rb'{"s":"tab\there \u0001 \u00e9 \/"}'
        assert render(line) == '{\n  "s": "tab\\there \\u0001 é /"\n}\n'

    def test_lone_surrogate_is_escaped(self, render) -> None:
        assert render(rb'["\ud800"]') == '[\n  "\\ud800"\n]\n'

    def test_output_parses_back_to_the_same_value(self, render, message_lines) -> None:
        for line in message_lines:
            assert json.loads(render(line)) == json.loads(line)

    def test_invalid_indent(self, plain_engine) -> None:
        with pytest.raises(ValueError):
            PrettyPrinter(plain_engine, indent_width=0)


# ---------------------------------------------------------------------------
# Streaming behaviour
# ---------------------------------------------------------------------------

class TestStreaming:
    def test_chunks_precede_parse_error(self, plain_engine) -> None:
        printer = PrettyPrinter(plain_engine)
        chunks = printer.render(JsonParser().events(b'{"a": [1, 2, }'))
        assert next(chunks) == "{"
        assert next(chunks) == '\n  "a": '
        with pytest.raises(ParseError):
            list(chunks)

    def test_unclosed_event_stream(self, plain_engine) -> None:
        printer = PrettyPrinter(plain_engine)
        with pytest.raises(ValueError):
            list(printer.render([ev.OBJECT_START, ev.key("a")]))

    def test_last_type_tracks_discriminator(self, plain_engine) -> None:
        printer = PrettyPrinter(plain_engine)
        "".join(printer.render(JsonParser().events(b'{"type":"user","x":1}')))
        assert printer.last_type == "user"
        "".join(printer.render(JsonParser().events(b"[1]")))
        assert printer.last_type is None

    def test_nested_type_key_is_not_the_discriminator(self, plain_engine) -> None:
        printer = PrettyPrinter(plain_engine)
        "".join(printer.render(JsonParser().events(b'{"message":{"type":"text"}}')))
        assert printer.last_type is None

    def test_custom_discriminator(self, plain_engine) -> None:
        printer = PrettyPrinter(plain_engine, discriminator="kind")
        "".join(printer.render(JsonParser().events(b'{"type":"user","kind":"event"}')))
        assert printer.last_type == "event"


class TestFormatDocument:
    def test_accepts_multiline_input(self) -> None:
        assert format_document('{\n  "a": [1,\n 2]\n}') == '{\n  "a": [\n    1,\n    2\n  ]\n}\n'

    def test_is_idempotent(self, message_lines) -> None:
        for line in message_lines:
            once = format_document(line)
            assert format_document(once) == once

    def test_indent_argument(self) -> None:
        assert format_document('{"a":1}', indent_width=3) == '{\n   "a": 1\n}\n'


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

class TestColoredOutput:
    def test_role_colors(self, render, color_engine) -> None:
        assert render('{"a": 1}', engine=color_engine) == (
            "\x1b[37m{\x1b[0m\n"
            '  \x1b[36m"a"\x1b[0m\x1b[37m:\x1b[0m \x1b[33m1\x1b[0m\n'
            "\x1b[37m}\x1b[0m\n"
        )

    def test_scalar_roles(self, render, color_engine) -> None:
        out = render('["s", true, null]', engine=color_engine)
        assert '\x1b[32m"s"\x1b[0m' in out
        assert "\x1b[35mtrue\x1b[0m" in out
        assert "\x1b[90mnull\x1b[0m" in out

    def test_discriminator_uses_type_color(self, color_engine) -> None:
        printer = PrettyPrinter(color_engine)
        first = "".join(printer.render(JsonParser().events(b'{"type":"user"}')))
        second = "".join(printer.render(JsonParser().events(b'{"type":"assistant"}')))
        again = "".join(printer.render(JsonParser().events(b'{"type":"user"}')))
        assert '\x1b[36m"user"\x1b[0m' in first
        assert '\x1b[35m"assistant"\x1b[0m' in second
        assert again == first

    def test_nested_type_value_uses_string_color(self, render, color_engine) -> None:
        out = render('{"message":{"type":"text"}}', engine=color_engine)
        assert '\x1b[32m"text"\x1b[0m' in out
        assert color_engine.stats().total_types == 0

    def test_stripped_output_equals_plain(self, render, color_engine, message_lines) -> None:
        for line in message_lines:
            colored = render(line, engine=color_engine)
            assert contains_ansi(colored)
            assert strip_ansi(colored) == render(line)

    def test_disabled_engine_emits_no_escapes(self, render, plain_engine, message_lines) -> None:
        for line in message_lines:
            assert not contains_ansi(render(line, engine=plain_engine))
        assert plain_engine.stats().total_types == 0


@pytest.mark.parametrize("text,expected", [
    ("", '""'),
    ("plain", '"plain"'),
    ('a"b', '"a\\"b"'),
    ("\x00\x1f", '"\\u0000\\u001f"'),
    ("\b\f\n\r\t", '"\\b\\f\\n\\r\\t"'),
    ("\x7f", '"\x7f"'),
])
def test_quote(text: str, expected: str) -> None:
    assert quote(text) == expected
