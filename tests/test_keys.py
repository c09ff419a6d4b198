"""Tests for rad.tui.keys and rad.tui.event."""

from __future__ import annotations

import pytest

from rad.tui.event import KeyEvent, key_event
from rad.tui.keys import Key, key_matches, matches_key, normalize_key_id, parse_key


class TestParseKey:
    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ("\x1b[A", "up"),
            ("\x1b[B", "down"),
            ("\x1b[C", "right"),
            ("\x1b[D", "left"),
            ("\x1bOA", "up"),
            ("\x1b[H", "home"),
            ("\x1b[F", "end"),
            ("\x1b[5~", "pageUp"),
            ("\x1b[6~", "pageDown"),
            ("\x1b[3~", "delete"),
            ("\x1b[Z", "shift+tab"),
            ("\r", "enter"),
            ("\t", "tab"),
            ("\x1b", "escape"),
            ("\x7f", "backspace"),
            (" ", "space"),
        ],
    )
    def test_named_keys(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    def test_modified_arrows(self) -> None:
        assert parse_key("\x1b[1;5A") == "ctrl+up"
        assert parse_key("\x1b[1;2B") == "shift+down"
        assert parse_key("\x1b[1;3C") == "alt+right"

    def test_ctrl_letters(self) -> None:
        assert parse_key("\x03") == "ctrl+c"
        assert parse_key("\x01") == "ctrl+a"

    def test_alt_prefix(self) -> None:
        assert parse_key("\x1bx") == "alt+x"
        assert parse_key("\x1bX") == "shift+alt+x"

    def test_printable(self) -> None:
        assert parse_key("q") == "q"
        assert parse_key("é") == "é"

    def test_unknown(self) -> None:
        assert parse_key("") is None
        assert parse_key("\x1b[99~") is None
        assert parse_key("abc") is None


class TestMatching:
    def test_normalize_orders_modifiers(self) -> None:
        assert normalize_key_id("alt+ctrl+x") == "ctrl+alt+x"
        assert normalize_key_id("shift+ctrl+up") == "ctrl+shift+up"

    def test_matches_key(self) -> None:
        assert matches_key("\x1b[A", Key.up)
        assert matches_key("\x03", Key.ctrl("c"))
        assert not matches_key("\x1b[B", Key.up)

    def test_key_matches_forms(self) -> None:
        assert key_matches("j", None)
        assert key_matches("j", "j")
        assert key_matches("down", (Key.down, "j"))
        assert key_matches("x", lambda key: key in "xyz")
        assert not key_matches("k", [Key.down, "j"])


class TestKeyEvent:
    def test_char_of_printable(self) -> None:
        assert KeyEvent("a", "a").char == "a"
        assert KeyEvent("a", "A").char == "A"

    def test_char_of_space(self) -> None:
        assert KeyEvent("space", " ").char == " "

    def test_no_char_for_named_keys(self) -> None:
        assert KeyEvent("up", "\x1b[A").char is None

    def test_key_event_from_raw(self) -> None:
        assert key_event("\x1b[A") == KeyEvent("up", "\x1b[A")
        assert key_event("\x1b[99~") is None
