"""Where on the terminal the application draws."""

from __future__ import annotations

from dataclasses import dataclass

from rad.tui.buffer import Rect

FULLSCREEN = "fullscreen"
INLINE = "inline"
FIXED = "fixed"

INLINE_HEIGHT = 20


@dataclass(frozen=True)
class Viewport:
    """Drawing region of the terminal.

    * ``fullscreen``: the alternate screen, all rows and columns.
    * ``inline``: *height* rows starting at the cursor; output stays in the
      scrollback once the application exits.
    * ``fixed``: like ``inline`` but the rows are cleared on exit.
    """

    kind: str = FULLSCREEN
    height: int = 0

    @classmethod
    def fullscreen(cls) -> Viewport:
        return cls(FULLSCREEN)

    @classmethod
    def inline(cls, height: int = INLINE_HEIGHT) -> Viewport:
        return cls(INLINE, max(1, height))

    @classmethod
    def fixed(cls, height: int) -> Viewport:
        return cls(FIXED, max(1, height))

    @property
    def is_fullscreen(self) -> bool:
        return self.kind == FULLSCREEN

    def area(self, columns: int, rows: int) -> Rect:
        """The drawable area for a terminal of the given size."""
        if self.is_fullscreen:
            return Rect(0, 0, columns, rows)
        return Rect(0, 0, columns, min(self.height, rows))
