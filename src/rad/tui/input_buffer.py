"""Reassembles raw stdin chunks into complete key sequences.

Terminal input arrives in arbitrary chunks.  An escape sequence such as
``ESC [ 1 ; 5 A`` may be split across reads, and a lone ``ESC`` is
ambiguous until either more bytes arrive or a short timeout passes.  The
:class:`InputBuffer` holds partial sequences back, emits complete ones one
by one and collects bracketed-paste payloads as a single unit.
"""

from __future__ import annotations

import asyncio
import re
from typing import Callable

ESC = "\x1b"
PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")

COMPLETE = "complete"
INCOMPLETE = "incomplete"


def _string_terminated(data: str) -> str:
    """Status of OSC/DCS/APC strings: terminated by ST (or BEL for OSC)."""
    if data.endswith(ESC + "\\") or (data[1] == "]" and data.endswith("\x07")):
        return COMPLETE
    return INCOMPLETE


def sequence_status(data: str) -> str:
    """Classify *data*, which starts with ``ESC``, as complete or not."""
    if len(data) == 1:
        return INCOMPLETE

    intro = data[1]

    if intro == "[":
        if data.startswith(ESC + "[M"):
            # Legacy X10 mouse: three raw bytes follow
            return COMPLETE if len(data) >= 6 else INCOMPLETE
        if len(data) < 3:
            return INCOMPLETE
        payload = data[2:]
        if not 0x40 <= ord(payload[-1]) <= 0x7E:
            return INCOMPLETE
        if payload.startswith("<"):
            return COMPLETE if _SGR_MOUSE_RE.match(payload) else INCOMPLETE
        return COMPLETE

    if intro in ("]", "P", "_"):
        return _string_terminated(data)

    if intro == "O":
        return COMPLETE if len(data) >= 3 else INCOMPLETE

    # Meta key: ESC followed by one character
    return COMPLETE


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences and an incomplete remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            if end > len(buffer):
                return sequences, buffer[pos:]
            if sequence_status(buffer[pos:end]) == COMPLETE:
                sequences.append(buffer[pos:end])
                pos = end
                break
            end += 1

    return sequences, ""


class InputBuffer:
    """Buffers raw input and emits complete sequences and paste payloads."""

    def __init__(
        self,
        on_data: Callable[[str], None],
        on_paste: Callable[[str], None] | None = None,
        *,
        timeout: float = 0.01,
    ) -> None:
        self._on_data = on_data
        self._on_paste = on_paste
        self._timeout = timeout
        self._buffer = ""
        self._paste: str | None = None
        self._flush_handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, data: str) -> None:
        """Feed a raw chunk of input."""
        self._cancel_flush()

        if self._paste is not None:
            self._paste += data
            self._finish_paste()
            return

        self._buffer += data

        start = self._buffer.find(PASTE_START)
        if start != -1:
            before = self._buffer[:start]
            self._paste = self._buffer[start + len(PASTE_START):]
            self._buffer = ""
            for sequence in split_sequences(before)[0]:
                self._on_data(sequence)
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._on_data(sequence)

        if self._buffer:
            self._schedule_flush()

    def flush(self) -> None:
        """Emit whatever is buffered as-is (e.g. a lone ``ESC``)."""
        self._cancel_flush()
        if self._buffer:
            data, self._buffer = self._buffer, ""
            self._on_data(data)

    def clear(self) -> None:
        self._cancel_flush()
        self._buffer = ""
        self._paste = None

    def _finish_paste(self) -> None:
        assert self._paste is not None
        end = self._paste.find(PASTE_END)
        if end == -1:
            return
        content = self._paste[:end]
        rest = self._paste[end + len(PASTE_END):]
        self._paste = None
        if self._on_paste is not None:
            self._on_paste(content)
        if rest:
            self.feed(rest)

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: nothing will complete the sequence later
            self.flush()
            return
        self._flush_handle = loop.call_later(self._timeout, self.flush)

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
