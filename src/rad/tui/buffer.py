"""Cell grid that widgets draw into, one per frame.

Coordinates are relative to the viewport: ``(0, 0)`` is its top-left cell.
Wide graphemes occupy two cells; the second one holds an empty symbol and
is skipped when the grid is turned into terminal lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rad.tui.style import PLAIN, RESET, Style
from rad.tui.utils import cells


@dataclass(frozen=True)
class Rect:
    """A rectangular screen area.  Negative sizes are clamped to zero."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        if self.x < 0:
            object.__setattr__(self, "x", 0)
        if self.y < 0:
            object.__setattr__(self, "y", 0)
        if self.width < 0:
            object.__setattr__(self, "width", 0)
        if self.height < 0:
            object.__setattr__(self, "height", 0)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def inner(self, horizontal: int = 1, vertical: int | None = None) -> Rect:
        """Shrink by a margin on every side; never smaller than empty."""
        if vertical is None:
            vertical = horizontal
        width = max(0, self.width - 2 * horizontal)
        height = max(0, self.height - 2 * vertical)
        return Rect(
            self.x + min(horizontal, self.width // 2),
            self.y + min(vertical, self.height // 2),
            width,
            height,
        )

    def intersection(self, other: Rect) -> Rect:
        x = max(self.x, other.x)
        y = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= x or bottom <= y:
            return Rect(x, y, 0, 0)
        return Rect(x, y, right - x, bottom - y)

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def row(self, offset: int, height: int = 1) -> Rect:
        """The *height* rows starting *offset* rows down, clipped to self."""
        return self.intersection(Rect(self.x, self.y + offset, self.width, height))


@dataclass
class Cell:
    symbol: str = " "
    style: Style = PLAIN


@dataclass
class Buffer:
    area: Rect
    content: list[Cell] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.content:
            self.content = [Cell() for _ in range(self.area.area)]

    @classmethod
    def empty(cls, width: int, height: int) -> Buffer:
        return cls(Rect(0, 0, width, height))

    def _index(self, x: int, y: int) -> int:
        return (y - self.area.y) * self.area.width + (x - self.area.x)

    def get(self, x: int, y: int) -> Cell:
        if not self.area.contains(x, y):
            raise IndexError(f"cell ({x}, {y}) outside of {self.area}")
        return self.content[self._index(x, y)]

    def set_string(
        self,
        x: int,
        y: int,
        text: str,
        style: Style = PLAIN,
        max_width: int | None = None,
    ) -> int:
        """Write *text* starting at ``(x, y)``, clipped to the buffer.

        Returns the column after the last written cell.
        """
        if y < self.area.y or y >= self.area.bottom:
            return x
        limit = self.area.right
        if max_width is not None:
            limit = min(limit, x + max(0, max_width))

        col = x
        for symbol, width in cells(text.replace("\t", "   ")):
            if col + width > limit:
                break
            if col >= self.area.x:
                cell = self.content[self._index(col, y)]
                cell.symbol = symbol
                cell.style = style
                for extra in range(1, width):
                    filler = self.content[self._index(col + extra, y)]
                    filler.symbol = ""
                    filler.style = style
            col += width
        return col

    def set_style(self, rect: Rect, style: Style) -> None:
        """Patch *style* onto every cell of *rect*."""
        rect = rect.intersection(self.area)
        for y in range(rect.y, rect.bottom):
            for x in range(rect.x, rect.right):
                cell = self.content[self._index(x, y)]
                cell.style = cell.style.patch(style)

    def fill(self, rect: Rect, symbol: str = " ", style: Style = PLAIN) -> None:
        rect = rect.intersection(self.area)
        for y in range(rect.y, rect.bottom):
            for x in range(rect.x, rect.right):
                cell = self.content[self._index(x, y)]
                cell.symbol = symbol
                cell.style = style

    def to_lines(self) -> list[str]:
        """Render every row to a string with embedded SGR sequences."""
        lines: list[str] = []
        for y in range(self.area.y, self.area.bottom):
            out: list[str] = []
            current = PLAIN
            for x in range(self.area.x, self.area.right):
                cell = self.content[self._index(x, y)]
                if not cell.symbol:
                    continue
                if cell.style != current:
                    out.append(RESET if current != PLAIN else "")
                    out.append(cell.style.sgr())
                    current = cell.style
                out.append(cell.symbol)
            if current != PLAIN:
                out.append(RESET)
            lines.append("".join(out))
        return lines

    def plain_lines(self) -> list[str]:
        """Rows without any styling, trailing spaces kept."""
        return [
            "".join(
                self.content[self._index(x, y)].symbol
                for x in range(self.area.x, self.area.right)
            )
            for y in range(self.area.y, self.area.bottom)
        ]


class Frame:
    """One frame under construction: a buffer and the hardware cursor."""

    def __init__(self, buffer: Buffer) -> None:
        self.buffer = buffer
        self.cursor: tuple[int, int] | None = None

    @property
    def area(self) -> Rect:
        return self.buffer.area

    def render_text(self, rect: Rect, text: str, style: Style = PLAIN) -> None:
        """Draw *text* line by line into *rect*, clipping what does not fit."""
        for offset, line in enumerate(text.split("\n")):
            if offset >= rect.height:
                break
            self.buffer.set_string(rect.x, rect.y + offset, line, style, rect.width)

    def set_cursor(self, x: int, y: int) -> None:
        self.cursor = (x, y)
