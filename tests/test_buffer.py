"""Tests for rad.tui.buffer, rad.tui.style and rad.tui.utils."""

from __future__ import annotations

from rad.tui.buffer import Buffer, Frame, Rect
from rad.tui.style import PLAIN, RESET, Span, Style, plain_text, to_spans
from rad.tui.utils import strip_ansi, truncate_to_width, visible_width


class TestRect:
    def test_negative_sizes_clamped(self) -> None:
        rect = Rect(-1, 2, -5, 3)
        assert rect == Rect(0, 2, 0, 3)
        assert rect.is_empty()

    def test_inner_never_negative(self) -> None:
        assert Rect(0, 0, 1, 1).inner(1).is_empty()
        assert Rect(0, 0, 5, 4).inner(1) == Rect(1, 1, 3, 2)

    def test_intersection(self) -> None:
        a = Rect(0, 0, 10, 10)
        assert a.intersection(Rect(5, 5, 10, 10)) == Rect(5, 5, 5, 5)
        assert a.intersection(Rect(20, 20, 1, 1)).is_empty()

    def test_row(self) -> None:
        assert Rect(0, 0, 4, 3).row(2) == Rect(0, 2, 4, 1)
        assert Rect(0, 0, 4, 3).row(5).is_empty()


class TestBuffer:
    def test_set_string_clips_to_width(self) -> None:
        buf = Buffer.empty(5, 1)
        col = buf.set_string(0, 0, "hello world")
        assert col == 5
        assert buf.plain_lines() == ["hello"]

    def test_set_string_max_width(self) -> None:
        buf = Buffer.empty(10, 1)
        buf.set_string(2, 0, "abcdef", max_width=3)
        assert buf.plain_lines() == ["  abc     "]

    def test_wide_characters_take_two_cells(self) -> None:
        buf = Buffer.empty(4, 1)
        col = buf.set_string(0, 0, "日本語")
        assert col == 4
        assert buf.get(0, 0).symbol == "日"
        assert buf.get(1, 0).symbol == ""
        assert buf.to_lines() == ["日本"]

    def test_wide_character_not_split(self) -> None:
        buf = Buffer.empty(3, 1)
        buf.set_string(0, 0, "日本")
        assert buf.plain_lines() == ["日 "]

    def test_outside_rows_ignored(self) -> None:
        buf = Buffer.empty(3, 1)
        assert buf.set_string(0, 4, "abc") == 0
        assert buf.plain_lines() == ["   "]

    def test_styles_emit_sgr(self) -> None:
        buf = Buffer.empty(3, 1)
        buf.set_string(0, 0, "ab", Style(bold=True))
        assert buf.to_lines() == ["\x1b[1mab" + RESET + " "]

    def test_set_style_patches(self) -> None:
        buf = Buffer.empty(2, 1)
        buf.set_string(0, 0, "x", Style(fg="red"))
        buf.set_style(Rect(0, 0, 2, 1), Style(bold=True))
        assert buf.get(0, 0).style == Style(fg="red", bold=True)
        assert buf.get(1, 0).style == Style(bold=True)

    def test_fill(self) -> None:
        buf = Buffer.empty(3, 2)
        buf.fill(Rect(1, 0, 5, 5), "#")
        assert buf.plain_lines() == [" ##", " ##"]


class TestFrame:
    def test_render_text_clips_lines(self) -> None:
        frame = Frame(Buffer.empty(4, 2))
        frame.render_text(Rect(0, 0, 4, 2), "one\ntwo\nthree")
        assert frame.buffer.plain_lines() == ["one ", "two "]

    def test_cursor(self) -> None:
        frame = Frame(Buffer.empty(4, 2))
        assert frame.cursor is None
        frame.set_cursor(2, 1)
        assert frame.cursor == (2, 1)


class TestStyle:
    def test_plain_has_no_sgr(self) -> None:
        assert PLAIN.sgr() == ""
        assert PLAIN("text") == "text"

    def test_colors(self) -> None:
        assert Style(fg="red").sgr() == "\x1b[31m"
        assert Style(bg=236).sgr() == "\x1b[48;5;236m"
        assert Style(fg="#ff0000").sgr() == "\x1b[38;2;255;0;0m"

    def test_patch_keeps_unset(self) -> None:
        assert Style(fg="red").patch(Style(bold=True)) == Style(fg="red", bold=True)
        assert Style(fg="red").patch(Style(fg="blue")).fg == "blue"

    def test_spans(self) -> None:
        assert to_spans("a", Style(dim=True)) == [Span("a", Style(dim=True))]
        assert plain_text([Span("a"), Span("b")]) == "ab"


class TestWidth:
    def test_visible_width_ignores_ansi(self) -> None:
        assert visible_width("\x1b[1mbold\x1b[0m") == 4
        assert strip_ansi("\x1b[31mx\x1b[0m") == "x"

    def test_wide(self) -> None:
        assert visible_width("日本") == 4

    def test_truncate(self) -> None:
        assert truncate_to_width("abcdef", 4) == "abcd"
        assert visible_width(truncate_to_width("abcdef", 4, "…")) <= 4
