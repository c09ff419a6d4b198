"""Constraint-based splitting of screen areas.

A :class:`Layout` divides a :class:`~rad.tui.buffer.Rect` along one axis
according to a list of :class:`Constraint` values.  Splits never produce
negative sizes and never leave the parent area, however small it is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from rad.tui.buffer import Rect

VERTICAL = "vertical"
HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class Constraint:
    """Size request of one segment.

    ``kind`` is one of ``length`` (exact cells), ``min`` (at least *value*
    cells, grows into leftover space), ``percentage`` (of the split axis)
    or ``fill`` (shares leftover space proportionally to *value*).
    """

    kind: str
    value: int

    @classmethod
    def length(cls, value: int) -> Constraint:
        return cls("length", max(0, value))

    @classmethod
    def min(cls, value: int) -> Constraint:
        return cls("min", max(0, value))

    @classmethod
    def percentage(cls, value: int) -> Constraint:
        return cls("percentage", min(100, max(0, value)))

    @classmethod
    def fill(cls, weight: int = 1) -> Constraint:
        return cls("fill", max(1, weight))

    @staticmethod
    def from_lengths(lengths: Sequence[int]) -> list[Constraint]:
        return [Constraint.length(n) for n in lengths]


def _distribute(total: int, weights: Sequence[int]) -> list[int]:
    """Split *total* cells proportionally to *weights*, remainder to the front."""
    weight_sum = sum(weights)
    if weight_sum == 0 or total <= 0:
        return [0] * len(weights)
    shares = [total * w // weight_sum for w in weights]
    rest = total - sum(shares)
    for i in range(len(shares)):
        if rest == 0:
            break
        shares[i] += 1
        rest -= 1
    return shares


def _sizes(constraints: Sequence[Constraint], total: int) -> list[int]:
    sizes: list[int] = []
    for c in constraints:
        if c.kind == "percentage":
            sizes.append(total * c.value // 100)
        elif c.kind == "fill":
            sizes.append(0)
        else:
            sizes.append(c.value)

    # Over-committed: clip from the front, later segments get what is left
    remaining = total
    for i, size in enumerate(sizes):
        sizes[i] = min(size, remaining)
        remaining -= sizes[i]

    if remaining > 0:
        growable = [i for i, c in enumerate(constraints) if c.kind == "fill"]
        weights = [constraints[i].value for i in growable]
        if not growable:
            growable = [i for i, c in enumerate(constraints) if c.kind == "min"]
            weights = [1] * len(growable)
        if growable:
            for i, extra in zip(growable, _distribute(remaining, weights)):
                sizes[i] += extra
        elif sizes:
            # Without growable segments the last one takes the leftover space
            sizes[-1] += remaining

    return sizes


@dataclass(frozen=True)
class Layout:
    direction: str
    constraints: tuple[Constraint, ...] = field(default_factory=tuple)
    horizontal_margin: int = 0
    vertical_margin: int = 0
    spacing: int = 0

    @classmethod
    def vertical(cls, constraints: Sequence[Constraint], **kwargs: int) -> Layout:
        return cls(VERTICAL, tuple(constraints), **kwargs)

    @classmethod
    def horizontal(cls, constraints: Sequence[Constraint], **kwargs: int) -> Layout:
        return cls(HORIZONTAL, tuple(constraints), **kwargs)

    def margin(self, horizontal: int, vertical: int | None = None) -> Layout:
        return Layout(
            self.direction,
            self.constraints,
            horizontal_margin=horizontal,
            vertical_margin=horizontal if vertical is None else vertical,
            spacing=self.spacing,
        )

    def __len__(self) -> int:
        return len(self.constraints)

    def split(self, area: Rect) -> list[Rect]:
        inner = area.inner(self.horizontal_margin, self.vertical_margin)
        count = len(self.constraints)
        if count == 0:
            return []

        axis = inner.height if self.direction == VERTICAL else inner.width
        gaps = min(self.spacing * (count - 1), axis)
        sizes = _sizes(self.constraints, axis - gaps)

        rects: list[Rect] = []
        offset = 0
        for i, size in enumerate(sizes):
            if self.direction == VERTICAL:
                rects.append(Rect(inner.x, inner.y + offset, inner.width, size))
            else:
                rects.append(Rect(inner.x + offset, inner.y, size, inner.height))
            offset += size
            if i < count - 1:
                offset += min(self.spacing, max(0, axis - offset))
        return rects


# ---------------------------------------------------------------------------
# Predefined layouts
# ---------------------------------------------------------------------------


def fill() -> Layout:
    """A single segment covering the whole area."""
    return Layout.vertical([Constraint.fill(1)])


def centered_rect(area: Rect, percent_x: int, percent_y: int) -> Rect:
    """A rectangle of the given percentages centered inside *area*."""
    height = area.height * percent_y // 100
    width = area.width * percent_x // 100
    return Rect(
        area.x + (area.width - width) // 2,
        area.y + (area.height - height) // 2,
        width,
        height,
    )


@dataclass(frozen=True)
class DefaultPage:
    component: Rect
    context: Rect
    shortcuts: Rect


def default_page(area: Rect, context_height: int, shortcuts_height: int) -> DefaultPage:
    """Main component on top, then a context bar and a shortcuts line."""
    component_height = max(0, area.height - context_height - shortcuts_height)
    component, context, shortcuts = Layout.vertical(
        Constraint.from_lengths([component_height, context_height, shortcuts_height]),
        horizontal_margin=1,
    ).split(area)
    return DefaultPage(component, context, shortcuts)


class Expandable3:
    """Three panes that adapt to the width of the screen.

    Up to 140 columns: a left half and a right half split 65/35 vertically.
    Wider: three equal columns.  ``left_only`` collapses to one pane.
    """

    def __init__(self, left_only: bool = False) -> None:
        self.left_only = left_only

    def __len__(self) -> int:
        return 1 if self.left_only else 3

    def split(self, area: Rect) -> list[Rect]:
        if self.left_only:
            return [area]
        if area.width <= 140:
            left, right = Layout.horizontal(
                [Constraint.percentage(50), Constraint.percentage(50)]
            ).split(area)
            right_top, right_bottom = Layout.vertical(
                [Constraint.percentage(65), Constraint.percentage(35)]
            ).split(right)
            return [left, right_top, right_bottom]
        return Layout.horizontal([Constraint.percentage(33)] * 3).split(area)


class Popup:
    """One centered area of the given percentages of the parent."""

    def __init__(self, percent_x: int, percent_y: int) -> None:
        self.percent_x = percent_x
        self.percent_y = percent_y

    def __len__(self) -> int:
        return 1

    def split(self, area: Rect) -> list[Rect]:
        return [centered_rect(area, self.percent_x, self.percent_y)]
