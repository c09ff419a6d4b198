"""Tests for the renderer and terminal session in rad.tui.terminal."""

from __future__ import annotations

import os
import sys
import termios

import pytest

from rad.tui.buffer import Buffer, Frame
from rad.tui.errors import TerminalError
from rad.tui.terminal import ProcessTerminal, Renderer, TerminalSession
from rad.tui.viewport import Viewport

from .virtual_terminal import VirtualTerminal


def make_frame(*rows: str) -> Frame:
    width = max(len(row) for row in rows)
    frame = Frame(Buffer.empty(width, len(rows)))
    for y, row in enumerate(rows):
        frame.buffer.set_string(0, y, row)
    return frame


def noop(*_: object) -> None:
    pass


class TestRenderer:
    def test_first_frame_is_full_redraw(self) -> None:
        terminal = VirtualTerminal()
        renderer = Renderer(terminal)
        renderer.render(make_frame("abc", "def"))
        assert renderer.full_redraws == 1
        assert "abc" in terminal.output and "def" in terminal.output

    def test_only_changed_lines_rewritten(self) -> None:
        terminal = VirtualTerminal()
        renderer = Renderer(terminal)
        renderer.render(make_frame("abc", "def"))
        terminal.clear_buffer()

        renderer.render(make_frame("abc", "xyz"))
        assert renderer.full_redraws == 1
        assert "xyz" in terminal.output
        assert "abc" not in terminal.output

    def test_invalidate_forces_full_redraw(self) -> None:
        terminal = VirtualTerminal()
        renderer = Renderer(terminal)
        renderer.render(make_frame("abc"))
        renderer.invalidate()
        terminal.clear_buffer()

        renderer.render(make_frame("abc"))
        assert renderer.full_redraws == 2
        assert "abc" in terminal.output

    def test_width_change_forces_full_redraw(self) -> None:
        renderer = Renderer(VirtualTerminal())
        renderer.render(make_frame("abc"))
        renderer.render(make_frame("abcd"))
        assert renderer.full_redraws == 2

    def test_cursor_shown_where_requested(self) -> None:
        terminal = VirtualTerminal()
        renderer = Renderer(terminal)
        frame = make_frame("abc", "def")
        frame.set_cursor(2, 0)
        renderer.render(frame)
        assert terminal.output.endswith("\x1b[1A\r\x1b[2C\x1b[?25h")

    def test_empty_frame(self) -> None:
        terminal = VirtualTerminal()
        Renderer(terminal).render(Frame(Buffer.empty(0, 0)))
        assert terminal.write_count == 1


class TestTerminalSession:
    def test_fullscreen_enters_and_leaves_alternate_screen(self) -> None:
        terminal = VirtualTerminal(rows=5, columns=10)
        session = TerminalSession(terminal, Viewport.fullscreen())
        session.open(noop, noop)
        assert terminal.started
        assert terminal.alternate_screen
        assert not terminal.cursor_visible

        session.close()
        assert not terminal.alternate_screen
        assert terminal.cursor_visible
        assert not terminal.started

    def test_close_only_once(self) -> None:
        terminal = VirtualTerminal()
        session = TerminalSession(terminal, Viewport.inline(3))
        session.open(noop, noop)
        session.close()
        session.close()
        assert terminal.stop_count == 1
        assert session.closed

    def test_close_without_open_does_nothing(self) -> None:
        terminal = VirtualTerminal()
        TerminalSession(terminal, Viewport.inline(3)).close()
        assert terminal.stop_count == 0

    def test_inline_reserves_rows(self) -> None:
        terminal = VirtualTerminal(rows=10, columns=10)
        TerminalSession(terminal, Viewport.inline(3)).open(noop, noop)
        assert terminal.output.startswith("\n\n\x1b[2A")

    def test_write_failure_still_stops_terminal(self) -> None:
        terminal = VirtualTerminal()
        session = TerminalSession(terminal, Viewport.inline(2))
        session.open(noop, noop)
        terminal.fail_after = 0
        with pytest.raises(TerminalError):
            session.draw(make_frame("ab"))

        session.close()
        assert terminal.stop_count == 1
        assert not terminal.started


class BrokenStdout:
    def write(self, data: str) -> int:
        raise OSError("broken pipe")

    def flush(self) -> None:
        pass


class RecordingStdout:
    def __init__(self) -> None:
        self.writes: list[str] = []

    def write(self, data: str) -> int:
        self.writes.append(data)
        return len(data)

    def flush(self) -> None:
        pass


class TestProcessTerminal:
    def test_failed_start_restores_terminal_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        master, slave = os.openpty()
        try:
            before = termios.tcgetattr(slave)
            monkeypatch.setattr(sys, "stdout", BrokenStdout())
            terminal = ProcessTerminal(stdin=slave)
            session = TerminalSession(terminal, Viewport.inline(2))

            with pytest.raises(TerminalError):
                session.open(noop, noop)
            session.close()

            assert termios.tcgetattr(slave) == before
            assert not terminal.started
        finally:
            os.close(master)
            os.close(slave)

    def test_stop_restores_terminal_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        master, slave = os.openpty()
        try:
            before = termios.tcgetattr(slave)
            stdout = RecordingStdout()
            monkeypatch.setattr(sys, "stdout", stdout)
            terminal = ProcessTerminal(stdin=slave)

            terminal.start(noop, noop)
            assert termios.tcgetattr(slave) != before
            terminal.stop()
            terminal.stop()

            assert termios.tcgetattr(slave) == before
            assert stdout.writes == ["\x1b[?2004h", "\x1b[?2004l"]
        finally:
            os.close(master)
            os.close(slave)
