"""Tests for rad.tui.layout and rad.tui.viewport."""

from __future__ import annotations

import pytest

from rad.tui.buffer import Rect
from rad.tui.layout import (
    Constraint,
    Expandable3,
    Layout,
    Popup,
    centered_rect,
    default_page,
    fill,
)
from rad.tui.viewport import Viewport


def heights(rects: list[Rect]) -> list[int]:
    return [r.height for r in rects]


def widths(rects: list[Rect]) -> list[int]:
    return [r.width for r in rects]


class TestSplit:
    def test_lengths_and_min(self) -> None:
        rects = Layout.vertical([Constraint.length(3), Constraint.min(1)]).split(Rect(0, 0, 10, 20))
        assert heights(rects) == [3, 17]
        assert rects[1].y == 3

    def test_percentages(self) -> None:
        rects = Layout.horizontal(
            [Constraint.percentage(50), Constraint.percentage(50)]
        ).split(Rect(0, 0, 81, 1))
        # leftover goes to the last segment
        assert widths(rects) == [40, 41]

    def test_fill_weights(self) -> None:
        rects = Layout.horizontal(
            [Constraint.length(2), Constraint.fill(1), Constraint.fill(3)]
        ).split(Rect(0, 0, 10, 1))
        assert widths(rects) == [2, 2, 6]

    def test_spacing(self) -> None:
        rects = Layout.horizontal(
            [Constraint.length(3), Constraint.length(3)], spacing=1
        ).split(Rect(0, 0, 10, 1))
        assert [r.x for r in rects] == [0, 4]

    def test_margins(self) -> None:
        (rect,) = Layout.vertical([Constraint.min(1)]).margin(1).split(Rect(0, 0, 10, 5))
        assert rect == Rect(1, 1, 8, 3)

    def test_empty_constraints(self) -> None:
        assert Layout.vertical([]).split(Rect(0, 0, 10, 10)) == []

    @pytest.mark.parametrize("size", [0, 1, 2, 5])
    def test_never_out_of_bounds(self, size: int) -> None:
        area = Rect(2, 3, size, size)
        layout = Layout.vertical(
            [Constraint.length(4), Constraint.percentage(50), Constraint.min(3)],
            horizontal_margin=1,
            spacing=1,
        )
        for rect in layout.split(area):
            assert rect.width >= 0 and rect.height >= 0
            assert rect.bottom <= area.bottom
            assert rect.right <= area.right

    def test_over_committed_clips_later_segments(self) -> None:
        rects = Layout.vertical([Constraint.length(4), Constraint.length(4)]).split(Rect(0, 0, 1, 5))
        assert heights(rects) == [4, 1]


class TestPredefined:
    def test_fill_covers_area(self) -> None:
        area = Rect(0, 0, 7, 3)
        assert fill().split(area) == [area]

    def test_centered_rect(self) -> None:
        assert centered_rect(Rect(0, 0, 100, 50), 50, 50) == Rect(25, 12, 50, 25)

    def test_popup(self) -> None:
        assert len(Popup(60, 40)) == 1
        assert Popup(50, 50).split(Rect(0, 0, 10, 10)) == [Rect(2, 2, 5, 5)]

    def test_default_page(self) -> None:
        page = default_page(Rect(0, 0, 20, 10), 2, 1)
        assert page.component == Rect(1, 0, 18, 7)
        assert page.context == Rect(1, 7, 18, 2)
        assert page.shortcuts == Rect(1, 9, 18, 1)

    def test_expandable3_narrow(self) -> None:
        left, top, bottom = Expandable3().split(Rect(0, 0, 100, 20))
        assert left.width == 50
        assert top.x == 50 and bottom.x == 50
        assert top.height == 13 and bottom.height == 7

    def test_expandable3_wide(self) -> None:
        rects = Expandable3().split(Rect(0, 0, 150, 20))
        assert len(rects) == 3
        assert all(r.height == 20 for r in rects)

    def test_expandable3_left_only(self) -> None:
        area = Rect(0, 0, 150, 20)
        assert Expandable3(left_only=True).split(area) == [area]


class TestViewport:
    def test_fullscreen_uses_whole_terminal(self) -> None:
        assert Viewport.fullscreen().area(80, 24) == Rect(0, 0, 80, 24)

    def test_inline_height_is_clamped(self) -> None:
        assert Viewport.inline(20).area(80, 10) == Rect(0, 0, 80, 10)
        assert Viewport.inline(5).area(80, 10) == Rect(0, 0, 80, 5)

    def test_inline_default_height(self) -> None:
        assert Viewport.inline().height == 20
