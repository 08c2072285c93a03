"""Tests for precommit_supervisor.ansi module."""

import pytest

from precommit_supervisor.ansi import (
    MAX_PENDING_ESCAPE,
    AnsiRenderer,
    OscStripper,
    strip_ansi,
    strip_osc,
)

HYPERLINK = "\x1b]8;;https://pre-commit.com\x1b\\pre-commit\x1b]8;;\x1b\\"

SAMPLES = [
    "plain text",
    HYPERLINK,
    "\x1b]0;window title\x07black....\x1b[42mPassed\x1b[m",
    "\x1b\x1b]0;inner\x07]0;outer\x07done",
    "unterminated \x1b]8;;http://example.com",
    "\x1b[1;31mred\x1b[0m \x1b]2;t\x1b\\after",
]


class TestStripOsc:
    """Tests for strip_osc."""

    def test_removes_hyperlink_keeps_label(self):
        assert strip_osc(HYPERLINK) == "pre-commit"

    def test_bel_terminator(self):
        assert strip_osc("a\x1b]0;title\x07b") == "ab"

    def test_keeps_sgr(self):
        text = "\x1b[31mFailed\x1b[m"
        assert strip_osc(text) == text

    def test_sequence_formed_after_inner_removal(self):
        assert strip_osc("\x1b\x1b]0;inner\x07]0;outer\x07done") == "done"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        once = strip_osc(text)
        assert strip_osc(once) == once


class TestStripAnsi:
    """Tests for strip_ansi."""

    def test_removes_sgr_and_osc(self):
        assert strip_ansi("\x1b[1;31mred\x1b[0m " + HYPERLINK) == "red pre-commit"

    def test_removes_cursor_movement(self):
        assert strip_ansi("\x1b[2Kline\x1b[1A") == "line"


class TestOscStripper:
    """Tests for the streaming OSC filter."""

    def test_passthrough(self):
        stripper = OscStripper()
        assert stripper.feed("hello\n") == "hello\n"
        assert stripper.pending == ""

    def test_sequence_split_in_body(self):
        stripper = OscStripper()
        assert stripper.feed("abc\x1b]8;;http") == "abc"
        assert stripper.pending == "\x1b]8;;http"
        assert stripper.feed("://x\x07def") == "def"
        assert stripper.pending == ""

    def test_sequence_split_inside_terminator(self):
        stripper = OscStripper()
        assert stripper.feed("x\x1b]8;;url\x1b") == "x"
        assert stripper.feed("\\label") == "label"

    def test_lone_escape_held(self):
        stripper = OscStripper()
        assert stripper.feed("red\x1b") == "red"
        assert stripper.feed("[31mX") == "\x1b[31mX"

    def test_matches_whole_text_filtering(self):
        text = "a" + HYPERLINK + "b\x1b]0;t\x07c\x1b[32md"
        stripper = OscStripper()
        out = "".join(stripper.feed(text[i : i + 3]) for i in range(0, len(text), 3))
        out += stripper.flush()
        assert out == strip_osc(text)

    def test_flush_releases_lone_escape(self):
        stripper = OscStripper()
        stripper.feed("end\x1b")
        assert stripper.flush() == "\x1b"
        assert stripper.pending == ""

    def test_flush_drops_unterminated_osc(self):
        stripper = OscStripper()
        assert stripper.feed("text\x1b]8;;http://never-closed") == "text"
        assert stripper.flush() == ""

    def test_oversized_partial_released(self):
        stripper = OscStripper()
        text = "\x1b]" + "a" * MAX_PENDING_ESCAPE
        assert stripper.feed(text) == text
        assert stripper.pending == ""

    def test_reset(self):
        stripper = OscStripper()
        stripper.feed("\x1b]8;;")
        stripper.reset()
        assert stripper.pending == ""


class TestAnsiRenderer:
    """Tests for SGR rendering into rich Text."""

    def test_plain_has_no_escapes(self):
        line = AnsiRenderer().render_line("\x1b[31mred\x1b[0m plain")
        assert line.plain == "red plain"

    def test_colour_becomes_style(self):
        line = AnsiRenderer().render_line("\x1b[31mred\x1b[0m")
        assert line.spans
        assert line.spans[0].style.color.name == "red"

    def test_style_carries_to_next_line(self):
        renderer = AnsiRenderer()
        renderer.render_line("\x1b[32mgreen starts")
        line = renderer.render_line("still green")
        assert line.spans[0].style.color.name == "green"

    def test_reset_clears_style(self):
        renderer = AnsiRenderer()
        renderer.render_line("\x1b[32mgreen starts")
        renderer.reset()
        assert renderer.render_line("plain").spans == []

    def test_carriage_return_overwrites(self):
        assert AnsiRenderer().render_line("50%\r100%").plain == "100%"

    def test_trailing_carriage_return(self):
        assert AnsiRenderer().render_line("done\r").plain == "done"
