"""Input events delivered to the frontend.

Raw terminal input is parsed into one of three events: a key press, a
bracketed paste, or a terminal resize.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from rad.tui.keys import KeyId, parse_key


@dataclass(frozen=True)
class KeyEvent:
    """A key press.  ``key`` is the parsed identifier, ``data`` the raw bytes."""

    key: KeyId
    data: str = ""

    @property
    def char(self) -> str | None:
        """The printable character typed, if any."""
        if len(self.key) == 1:
            return self.key if len(self.data) != 1 else self.data
        if self.key == "space":
            return " "
        return None


@dataclass(frozen=True)
class PasteEvent:
    text: str


@dataclass(frozen=True)
class ResizeEvent:
    columns: int
    rows: int


Event = Union[KeyEvent, PasteEvent, ResizeEvent]


def key_event(data: str) -> KeyEvent | None:
    """Build a :class:`KeyEvent` from raw input, or ``None`` if unknown."""
    key = parse_key(data)
    if key is None:
        return None
    return KeyEvent(key=key, data=data)
