"""Terminal abstraction and frame output.

Provides a ``Terminal`` protocol, a concrete ``ProcessTerminal`` that manages
raw mode, bracketed paste and resize detection on the process's stdin and
stdout, the line-diffing ``Renderer`` that commits frames, and the
``TerminalSession`` that acquires the terminal for one application run and
restores it exactly once.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol, TextIO

from rad.tui.buffer import Frame
from rad.tui.errors import TerminalError
from rad.tui.input_buffer import PASTE_END, PASTE_START, InputBuffer
from rad.tui.viewport import FIXED, Viewport

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_ALT_SCREEN_ENTER = "\x1b[?1049h"
_ALT_SCREEN_LEAVE = "\x1b[?1049l"

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_CLEAR_FROM_CURSOR = "\x1b[J"
_CLEAR_TO_EOL = "\x1b[K"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """What the frontend needs from a terminal: lifecycle, size and output."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...

    def enter_alternate_screen(self) -> None: ...

    def leave_alternate_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin and stdout.

    ``start`` puts stdin into raw mode, turns on bracketed paste and
    registers stdin and SIGWINCH with the running asyncio loop.  Reads are
    reassembled into whole sequences by an :class:`InputBuffer`; a paste is
    handed on wrapped in its bracketed-paste markers.  Failing writes raise
    :class:`TerminalError`.
    """

    def __init__(self, write_log: str = "", stdin: int | None = None) -> None:
        self._stdin = stdin
        self.write_log = write_log
        self._log_file: TextIO | None = None
        self._saved_attrs: list | None = None
        self._buffer: InputBuffer | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None

    @property
    def fd_in(self) -> int:
        return sys.stdin.fileno() if self._stdin is None else self._stdin

    def _size(self) -> os.terminal_size:
        try:
            return os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return os.terminal_size((80, 24))

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    @property
    def started(self) -> bool:
        return self._on_input is not None

    # -- lifecycle ----------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        try:
            self._saved_attrs = termios.tcgetattr(self.fd_in)
            tty.setraw(self.fd_in)
        except (termios.error, ValueError, OSError) as exc:
            raise TerminalError(f"cannot enter raw mode: {exc}") from exc

        self._on_input, self._on_resize = on_input, on_resize
        try:
            self._watch(on_input, on_resize)
        except BaseException:
            # leave cooked mode behind even when starting fails half way
            self.stop()
            raise

    def _watch(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        if self.write_log:
            try:
                self._log_file = open(self.write_log, "a", encoding="utf-8")
            except OSError as exc:
                logger.warning("Cannot open write log %s: %s", self.write_log, exc)
        self.write(_BRACKETED_PASTE_ENABLE)

        self._buffer = InputBuffer(on_input, self._forward_paste)
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, input and resize are not watched")
            return
        self._loop.add_reader(self.fd_in, self._read_stdin)
        try:
            self._loop.add_signal_handler(signal.SIGWINCH, on_resize)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug("Cannot watch SIGWINCH, resizes go unnoticed")

    def stop(self) -> None:
        """Undo ``start``.  Calling it again does nothing."""
        if not self.started:
            return
        self._on_input = self._on_resize = None

        try:
            self._emit(_BRACKETED_PASTE_DISABLE)
        except TerminalError:
            logger.debug("Could not disable bracketed paste")

        if self._loop is not None:
            try:
                self._loop.remove_reader(self.fd_in)
                self._loop.remove_signal_handler(signal.SIGWINCH)
            except (RuntimeError, ValueError) as exc:
                logger.debug("Cannot unregister terminal watchers: %s", exc)
            self._loop = None

        if self._buffer is not None:
            self._buffer.clear()
            self._buffer = None

        if self._saved_attrs is not None:
            try:
                termios.tcsetattr(self.fd_in, termios.TCSADRAIN, self._saved_attrs)
            except termios.error as exc:
                logger.warning("Failed to restore terminal attributes: %s", exc)
            self._saved_attrs = None

        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to stdout, copying it to the write log if enabled."""
        self._emit(data)
        if self._log_file is not None:
            self._log_file.write(data)

    def hide_cursor(self) -> None:
        self.write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self.write(_SHOW_CURSOR)

    def clear_screen(self) -> None:
        self.write(_CLEAR_SCREEN)

    def enter_alternate_screen(self) -> None:
        self.write(_ALT_SCREEN_ENTER)

    def leave_alternate_screen(self) -> None:
        self.write(_ALT_SCREEN_LEAVE)

    def _emit(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as exc:
            raise TerminalError(f"write to terminal failed: {exc}") from exc

    # -- input --------------------------------------------------------------

    def _forward_paste(self, text: str) -> None:
        if self._on_input is not None:
            self._on_input(PASTE_START + text + PASTE_END)

    def _read_stdin(self) -> None:
        try:
            chunk = os.read(self.fd_in, 4096)
        except OSError as exc:
            logger.debug("Reading stdin failed: %s", exc)
            return
        if chunk and self._buffer is not None:
            self._buffer.feed(chunk.decode("utf-8", errors="replace"))


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class Renderer:
    """Commits frames to a terminal, rewriting only the lines that changed.

    The renderer tracks which viewport row the terminal cursor is on and
    navigates relative to it, so the same code serves the alternate screen
    and an inline region below existing output.
    """

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal
        self._previous_lines: list[str] = []
        self._previous_width = -1
        self._cursor_row = 0
        self._force_full = True
        self.full_redraws = 0

    def invalidate(self) -> None:
        """Repaint everything on the next frame (e.g. after a resize)."""
        self._force_full = True

    def reset_cursor(self) -> None:
        """Forget the cursor position; the terminal cursor is at row 0."""
        self._cursor_row = 0

    def render(self, frame: Frame) -> None:
        lines = frame.buffer.to_lines()
        width = frame.area.width

        force_full = self._force_full or width != self._previous_width
        self._force_full = False

        out: list[str] = []
        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r")
        out.append(_HIDE_CURSOR)

        num_new = len(lines)
        num_old = len(self._previous_lines)

        if force_full:
            self.full_redraws += 1
            out.append(_CLEAR_FROM_CURSOR)
            for i, line in enumerate(lines):
                if i > 0:
                    out.append("\r\n")
                out.append(line)
                out.append(_CLEAR_TO_EOL)
            last_row = max(0, num_new - 1)
        else:
            total = max(num_new, num_old)
            for i in range(total):
                if i > 0:
                    out.append("\n")
                new_line = lines[i] if i < num_new else ""
                old_line = self._previous_lines[i] if i < num_old else ""
                if i >= num_new:
                    out.append("\r" + _CLEAR_TO_EOL)
                elif new_line != old_line:
                    out.append("\r")
                    out.append(new_line)
                    out.append(_CLEAR_TO_EOL)
                # unchanged lines are skipped, "\n" still moves down
            last_row = max(0, total - 1)

        self._previous_lines = lines
        self._previous_width = width

        if frame.cursor is not None:
            col, row = frame.cursor
        else:
            col, row = 0, last_row
        row = min(max(0, row), max(0, num_new - 1))

        delta = last_row - row
        if delta > 0:
            out.append(f"\x1b[{delta}A")
        elif delta < 0:
            out.append(f"\x1b[{-delta}B")
        out.append("\r")
        if col > 0:
            out.append(f"\x1b[{col}C")
        if frame.cursor is not None:
            out.append(_SHOW_CURSOR)
        self._cursor_row = row

        self.terminal.write("".join(out))

    def finish(self, clear: bool) -> None:
        """Leave the cursor below the drawn region, or clear the region."""
        out: list[str] = []
        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r")
        if clear:
            out.append(_CLEAR_FROM_CURSOR)
        elif self._previous_lines:
            rows = len(self._previous_lines)
            if rows > 1:
                out.append(f"\x1b[{rows - 1}B")
            out.append("\r\n")
        self._cursor_row = 0
        self._previous_lines = []
        self.terminal.write("".join(out))


# ---------------------------------------------------------------------------
# TerminalSession
# ---------------------------------------------------------------------------


class TerminalSession:
    """Acquires a terminal for one run and restores it exactly once."""

    def __init__(self, terminal: Terminal, viewport: Viewport) -> None:
        self.terminal = terminal
        self.viewport = viewport
        self.renderer = Renderer(terminal)
        self._opened = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self.terminal.start(on_input, on_resize)
        self._opened = True

        if self.viewport.is_fullscreen:
            self.terminal.enter_alternate_screen()
            self.terminal.clear_screen()
        else:
            # Make room below the cursor, scrolling if needed
            height = self.viewport.area(self.terminal.columns, self.terminal.rows).height
            if height > 1:
                self.terminal.write("\n" * (height - 1) + f"\x1b[{height - 1}A")
        self.terminal.hide_cursor()
        logger.debug("Terminal acquired (%s viewport)", self.viewport.kind)

    def draw(self, frame: Frame) -> None:
        self.renderer.render(frame)

    def close(self) -> None:
        """Restore the terminal.  Only the first call has any effect."""
        if self._closed or not self._opened:
            return
        self._closed = True

        try:
            if self.viewport.is_fullscreen:
                self.terminal.leave_alternate_screen()
            else:
                self.renderer.finish(clear=self.viewport.kind == FIXED)
            self.terminal.show_cursor()
        except TerminalError as exc:
            logger.warning("Failed to reset terminal output: %s", exc)
        finally:
            self.terminal.stop()
            logger.debug("Terminal restored")
