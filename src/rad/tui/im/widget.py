"""Built-in immediate-mode widgets.

Each widget is a short-lived object built during a frame.  Its ``ui`` method
takes the next area from the enclosing :class:`~rad.tui.im.ui.Ui`, handles
input if that area is focused, draws into the frame and reports back through
a :class:`Response`.  Anything a widget needs to remember between frames
lives in its :class:`~rad.tui.im.context.WidgetState`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, Protocol, Sequence, TypeVar

from rad.tui.buffer import Buffer, Frame, Rect
from rad.tui.event import KeyEvent, PasteEvent
from rad.tui.keys import Key
from rad.tui.layout import Constraint, Layout
from rad.tui.style import PLAIN, Content, Span, Style, plain_text, to_spans
from rad.tui.utils import cells, visible_width

if TYPE_CHECKING:
    from rad.tui.im.ui import Ui

R = TypeVar("R")


@dataclass
class Response:
    """What happened to a widget this frame.

    ``changed`` is set when user input changed the widget's value, and
    ``value`` holds the value after this frame (selection, scroll position,
    text and cursor, focus index, depending on the widget).
    """

    changed: bool = False
    value: Any = None


@dataclass
class InnerResponse(Generic[R]):
    inner: R
    response: Response = field(default_factory=Response)


class Widget(Protocol):
    def ui(self, ui: Ui, frame: Frame) -> Response: ...


# ---------------------------------------------------------------------------
# Borders
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Borders:
    """Which borders are drawn around a widget.

    ``spacer`` draws nothing but keeps a top and left margin.
    """

    kind: str
    top: int = 0
    left: int = 0

    @classmethod
    def spacer(cls, top: int = 0, left: int = 0) -> Borders:
        return cls("spacer", top, left)


Borders.NONE = Borders("none")  # type: ignore[attr-defined]
Borders.ALL = Borders("all")  # type: ignore[attr-defined]
Borders.TOP = Borders("top")  # type: ignore[attr-defined]
Borders.SIDES = Borders("sides")  # type: ignore[attr-defined]
Borders.BOTTOM = Borders("bottom")  # type: ignore[attr-defined]
Borders.BOTTOM_SIDES = Borders("bottom_sides")  # type: ignore[attr-defined]


def _hline(buffer: Buffer, area: Rect, y: int, ends: str, style: Style) -> None:
    if area.width == 0:
        return
    line = ends[0] + "─" * max(0, area.width - 2) + ends[1] if area.width > 1 else ends[0]
    buffer.set_string(area.x, y, line, style)


def _sides(buffer: Buffer, area: Rect, first: int, last: int, style: Style) -> None:
    for y in range(first, last):
        buffer.set_string(area.x, y, "│", style)
        if area.width > 1:
            buffer.set_string(area.right - 1, y, "│", style)


def render_block(
    frame: Frame,
    area: Rect,
    borders: Borders | None,
    style: Style,
) -> Rect:
    """Draw *borders* around *area* and return the area inside them."""
    if borders is None or borders.kind == "none" or area.is_empty():
        return area

    buffer = frame.buffer
    kind = borders.kind

    if kind == "spacer":
        return Rect(
            area.x + borders.left,
            area.y + borders.top,
            area.width - borders.left,
            area.height - borders.top,
        ).intersection(area)

    if kind in ("all", "top", "bottom"):
        top_ends = "├┤" if kind == "bottom" else "╭╮"
        bottom_ends = "├┤" if kind == "top" else "╰╯"
        _hline(buffer, area, area.y, top_ends, style)
        if area.height > 1:
            _hline(buffer, area, area.bottom - 1, bottom_ends, style)
        _sides(buffer, area, area.y + 1, area.bottom - 1, style)
        return area.inner(1, 1)

    if kind == "sides":
        _sides(buffer, area, area.y, area.bottom, style)
        return area.inner(1, 0)

    if kind == "bottom_sides":
        _sides(buffer, area, area.y, area.bottom - 1, style)
        _hline(buffer, area, area.bottom - 1, "╰╯", style)
        inner = area.inner(1, 0)
        return Rect(inner.x, inner.y, inner.width, inner.height - 1)

    raise ValueError(f"unknown borders: {kind!r}")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def text_lines(text: Any) -> list[list[Span]]:
    """Split text content into lines of spans.

    Strings and spans are split at newlines.  A sequence of spans is one
    line; any other sequence holds one line per element.
    """
    if isinstance(text, str):
        return [[Span(line)] for line in text.split("\n")]
    if isinstance(text, Span):
        return [[Span(line, text.style)] for line in text.text.split("\n")]
    items = list(text)
    if items and all(isinstance(item, Span) for item in items):
        return [items]
    return [to_spans(item) for item in items]


def draw_line(
    buffer: Buffer,
    x: int,
    y: int,
    spans: Sequence[Span],
    width: int,
    skip: int = 0,
    style: Style = PLAIN,
) -> int:
    """Draw *spans* at ``(x, y)`` within *width* cells, dropping the first
    *skip* cells.  *style* is patched under every span."""
    col = x
    limit = x + max(0, width)
    for span in spans:
        if col >= limit:
            break
        text = span.text
        if skip > 0:
            kept: list[str] = []
            for g, w in cells(text):
                if skip > 0:
                    skip = max(0, skip - w)
                    continue
                kept.append(g)
            text = "".join(kept)
        col = buffer.set_string(col, y, text, style.patch(span.style), limit - col)
    return col


def _border_style(ui: Ui, focused: bool) -> Style:
    return ui.theme.focus_border if focused else ui.theme.border


def _scrollbar(
    buffer: Buffer, area: Rect, length: int, offset: int, style: Style
) -> None:
    """Draw a one column thumb for *length* rows scrolled by *offset*."""
    if area.is_empty() or length <= area.height:
        return
    max_offset = length - area.height
    position = min(offset, max_offset) * (area.height - 1) // max(1, max_offset)
    buffer.set_string(area.x, area.y + position, "┃", style)


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

SMALL_WIDTH = 60
MEDIUM_WIDTH = 100


@dataclass
class Column:
    """A table column: header content, width and visibility rules."""

    text: Content
    width: Constraint
    skip: bool = False
    min_width: int = 0

    def hide_small(self) -> Column:
        self.min_width = SMALL_WIDTH
        return self

    def hide_medium(self) -> Column:
        self.min_width = MEDIUM_WIDTH
        return self

    def displayed(self, area_width: int) -> bool:
        return not self.skip and area_width >= self.min_width


def _visible_columns(columns: Sequence[Column], width: int) -> list[int]:
    return [i for i, c in enumerate(columns) if c.displayed(width)]


def _draw_row(
    buffer: Buffer,
    area: Rect,
    y: int,
    columns: Sequence[Column],
    row: Sequence[Content],
    spacing: int,
    style: Style = PLAIN,
) -> None:
    visible = _visible_columns(columns, area.width)
    widths = [columns[i].width for i in visible]
    rects = Layout.horizontal(widths, spacing=spacing).split(Rect(area.x, y, area.width, 1))
    for index, rect in zip(visible, rects):
        if index < len(row):
            draw_line(buffer, rect.x, y, to_spans(row[index]), rect.width, style=style)


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------


class Label:
    def __init__(self, content: Any, style: Style = PLAIN) -> None:
        self.content = content
        self.style = style

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, _ = ui.next_area()
        for offset, line in enumerate(text_lines(self.content)):
            if offset >= area.height:
                break
            draw_line(frame.buffer, area.x, area.y + offset, line, area.width, style=self.style)
        return Response()


class Separator:
    def __init__(self, symbol: str = "─") -> None:
        self.symbol = symbol

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, _ = ui.next_area()
        if not area.is_empty():
            frame.buffer.set_string(area.x, area.y, self.symbol * area.width, ui.theme.border)
        return Response()


class Columns:
    """A single row of columns, e.g. a table header."""

    def __init__(self, columns: Sequence[Column], borders: Borders | None = None) -> None:
        self.columns = columns
        self.borders = borders

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, focused = ui.next_area()
        area = render_block(frame, area, self.borders, _border_style(ui, focused))
        area = Rect(area.x, area.y, area.width - 1, area.height)
        if not area.is_empty():
            _draw_row(
                frame.buffer, area, area.y, self.columns,
                [c.text for c in self.columns], spacing=1, style=ui.theme.header,
            )
        return Response()


class Bar:
    """A status bar: columns without spacing on a filled background."""

    def __init__(self, columns: Sequence[Column], borders: Borders | None = None) -> None:
        self.columns = columns
        self.borders = borders

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, focused = ui.next_area()
        area = render_block(frame, area, self.borders, _border_style(ui, focused))
        if not area.is_empty():
            frame.buffer.set_style(area.row(0), ui.theme.bar)
            _draw_row(
                frame.buffer, area, area.y, self.columns,
                [c.text for c in self.columns], spacing=0, style=ui.theme.bar,
            )
        return Response()


class Shortcuts:
    """A line of ``key action`` hints separated by a divider."""

    def __init__(self, shortcuts: Sequence[tuple[str, str]], divider: str = "∙") -> None:
        self.shortcuts = list(shortcuts)
        self.divider = divider

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, _ = ui.next_area()
        theme = ui.theme
        spans: list[Span] = []
        for i, (short, action) in enumerate(self.shortcuts):
            if i > 0:
                spans.append(Span(f" {self.divider} ", theme.dim))
            spans.append(Span(short, theme.shortcut))
            spans.append(Span(" "))
            spans.append(Span(action, theme.shortcut_description))
        if not area.is_empty():
            draw_line(frame.buffer, area.x, area.y, spans, area.width)
        return Response()


class Table:
    """A selectable list of rows.

    ``selected`` is the selection held by the application; the table adopts
    it whenever it changes and otherwise keeps its own.
    """

    KEYS = (Key.up, "k", Key.down, "j", Key.page_up, Key.page_down, Key.home, Key.end)

    def __init__(
        self,
        items: Sequence[Any],
        columns: Sequence[Column],
        selected: int | None = None,
        *,
        empty_message: str | None = None,
        borders: Borders | None = None,
        show_scrollbar: bool = True,
        dim: bool = False,
        key: Any = None,
    ) -> None:
        self.items = items
        self.columns = columns
        self.selected = selected
        self.empty_message = empty_message or "Nothing to show"
        self.borders = borders
        self.show_scrollbar = show_scrollbar
        self.dim = dim
        self.key = key

    @staticmethod
    def _row(item: Any) -> Sequence[Content]:
        to_row = getattr(item, "to_row", None)
        return to_row() if callable(to_row) else item

    def _move(self, event: KeyEvent, selected: int, length: int, page: int) -> int:
        last = max(0, length - 1)
        key = event.key
        if key in (Key.up, "k"):
            return max(0, selected - 1)
        if key in (Key.down, "j"):
            return min(selected + 1, last)
        if key == Key.page_up:
            return max(0, selected - page)
        if key == Key.page_down:
            return min(selected + page, last)
        if key == Key.home:
            return 0
        return last

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, _ = ui.next_area()
        state = ui.widget_state("table", self.key)
        focused = state.focused
        length = len(self.items)

        if state.sync(self.selected):
            state.selected = self.selected
        if state.selected is not None:
            state.selected = min(state.selected, length - 1) if length else None

        area = render_block(frame, area, self.borders, _border_style(ui, focused))
        page = state.height or area.height

        before = state.selected
        while (event := ui.input_with_key(self.KEYS)) is not None:
            if not length:
                continue
            if state.selected is None:
                state.selected = 0
            else:
                state.selected = self._move(event, state.selected, length, page)

        if length == 0:
            hint = self.empty_message
            y = area.y + area.height // 2
            x = area.x + max(0, (area.width - visible_width(hint)) // 2)
            if area.height:
                frame.buffer.set_string(x, y, hint, ui.theme.placeholder, area.width)
        else:
            scroll = self.show_scrollbar and length > area.height
            table_area = Rect(area.x, area.y, area.width - (1 if scroll else 0), area.height)

            # keep the selection in view
            offset = state.scroll_row
            if state.selected is not None:
                if state.selected < offset:
                    offset = state.selected
                elif state.selected >= offset + table_area.height:
                    offset = state.selected - table_area.height + 1
            offset = max(0, min(offset, length - table_area.height))
            state.scroll_row = offset

            row_style = ui.theme.dim if self.dim and not focused else PLAIN
            for i in range(table_area.height):
                index = offset + i
                if index >= length:
                    break
                y = table_area.y + i
                style = row_style
                if index == state.selected:
                    style = ui.theme.highlight if focused else ui.theme.text.patch(Style(bold=True))
                    frame.buffer.set_style(table_area.row(i), style)
                _draw_row(
                    frame.buffer, table_area, y, self.columns,
                    self._row(self.items[index]), spacing=1, style=style,
                )

            if scroll:
                _scrollbar(
                    frame.buffer,
                    Rect(table_area.right, area.y, 1, area.height),
                    length,
                    offset,
                    PLAIN if focused else ui.theme.dim,
                )

        state.height = area.height
        state.width = area.width
        return Response(changed=state.selected != before, value=state.selected)


class TextView:
    """Scrollable, read-only text.

    ``scroll`` is a ``(row, column)`` position held by the application; it
    is adopted whenever it changes.  Scrolling is clamped with the height
    measured in the previous frame.
    """

    KEYS = (
        Key.up, "k", Key.down, "j", Key.left, "h", Key.right, "l",
        Key.page_up, Key.page_down, Key.home, Key.end,
    )

    def __init__(
        self,
        text: Any,
        scroll: tuple[int, int] | None = None,
        borders: Borders | None = None,
        *,
        key: Any = None,
    ) -> None:
        self.lines = text_lines(text)
        self.scroll = scroll
        self.borders = borders
        self.key = key

    def _scroll(self, key: str, row: int, col: int, page: int, width: int) -> tuple[int, int]:
        length = len(self.lines)
        end = max(0, length - page)
        if key in (Key.up, "k"):
            return max(0, row - 1), col
        if key in (Key.down, "j"):
            return min(row + 1, end), col
        if key in (Key.left, "h"):
            return row, max(0, col - 3)
        if key in (Key.right, "l"):
            longest = max((visible_width(plain_text(line)) for line in self.lines), default=0)
            return row, min(col + 3, max(0, longest - width))
        if key == Key.page_up:
            return max(0, row - page), col
        if key == Key.page_down:
            return min(row + page, end), col
        if key == Key.home:
            return 0, col
        return end, col

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, _ = ui.next_area()
        state = ui.widget_state("text_view", self.key)
        focused = state.focused

        if self.scroll is not None and state.sync(self.scroll):
            state.scroll_row, state.scroll_col = self.scroll

        area = render_block(frame, area, self.borders, _border_style(ui, focused))
        text_area = Rect(area.x, area.y, area.width - 1, area.height)
        page = state.height or text_area.height

        before = (state.scroll_row, state.scroll_col)
        while (event := ui.input_with_key(self.KEYS)) is not None:
            state.scroll_row, state.scroll_col = self._scroll(
                event.key, state.scroll_row, state.scroll_col, page, text_area.width
            )

        for i in range(text_area.height):
            index = state.scroll_row + i
            if index >= len(self.lines):
                break
            draw_line(
                frame.buffer, text_area.x, text_area.y + i,
                self.lines[index], text_area.width, skip=state.scroll_col,
            )

        _scrollbar(
            frame.buffer,
            Rect(text_area.right, area.y, 1, area.height),
            len(self.lines),
            state.scroll_row,
            PLAIN if focused else ui.theme.dim,
        )

        state.height = text_area.height
        state.width = text_area.width
        after = (state.scroll_row, state.scroll_col)
        return Response(changed=after != before, value=after)


class TextEdit:
    """A single line text input with a label.

    ``text`` and ``cursor`` are held by the application and adopted
    whenever they change; typed input is kept locally in the meantime so
    that nothing is lost while the store catches up.
    """

    EDIT_KEYS = (Key.backspace, Key.delete, Key.left, Key.right, Key.home, Key.end)

    def __init__(
        self,
        text: str = "",
        cursor: int | None = None,
        *,
        label: str | None = None,
        borders: Borders | None = None,
        inline_label: bool = True,
        show_cursor: bool = True,
        dim: bool = True,
        key: Any = None,
    ) -> None:
        self.text = text
        self.cursor = cursor
        self.label = label
        self.borders = borders
        self.inline_label = inline_label
        self.show_cursor = show_cursor
        self.dim = dim
        self.key = key

    @classmethod
    def _accepts(cls, event: Any) -> bool:
        if isinstance(event, PasteEvent):
            return True
        if not isinstance(event, KeyEvent):
            return False
        return event.key in cls.EDIT_KEYS or event.char is not None

    @staticmethod
    def _edit(event: Any, text: str, cursor: int) -> tuple[str, int]:
        if isinstance(event, PasteEvent):
            insert = event.text.replace("\r", "").replace("\n", " ")
            return text[:cursor] + insert + text[cursor:], cursor + len(insert)
        key = event.key
        if key == Key.backspace:
            if cursor == 0:
                return text, cursor
            return text[:cursor - 1] + text[cursor:], cursor - 1
        if key == Key.delete:
            return text[:cursor] + text[cursor + 1:], cursor
        if key == Key.left:
            return text, max(0, cursor - 1)
        if key == Key.right:
            return text, min(len(text), cursor + 1)
        if key == Key.home:
            return text, 0
        if key == Key.end:
            return text, len(text)
        char = event.char
        return text[:cursor] + char + text[cursor:], cursor + len(char)

    def ui(self, ui: Ui, frame: Frame) -> Response:
        area, _ = ui.next_area()
        state = ui.widget_state("text_edit", self.key)
        focused = state.focused

        if state.sync((self.text, self.cursor)):
            state.text = self.text
            cursor = len(self.text) if self.cursor is None else self.cursor
            state.cursor = max(0, min(cursor, len(self.text)))

        before = (state.text, state.cursor)
        while (event := ui.next_input(self._accepts)) is not None:
            state.text, state.cursor = self._edit(event, state.text, state.cursor)

        area = render_block(frame, area, self.borders, _border_style(ui, focused))
        if not area.is_empty():
            self._draw(ui, frame, area, state.text, state.cursor, focused)

        state.width = area.width
        state.height = area.height
        after = (state.text, state.cursor)
        return Response(changed=after != before, value=after)

    def _draw(
        self, ui: Ui, frame: Frame, area: Rect, text: str, cursor: int, focused: bool
    ) -> None:
        theme = ui.theme
        faded = not focused and self.dim
        accent = Style(fg="magenta", dim=faded)
        label = Span(f" {self.label or ''} ", accent.patch(Style(reversed=True)))
        input_style = theme.dim if faded else PLAIN
        overline = "▔" * area.width
        buffer = frame.buffer
        cursor_offset = visible_width(text[:cursor])

        if self.inline_label:
            label_width = visible_width(label.text)
            input_x = area.x + label_width + 1
            draw_line(buffer, area.x, area.y, [label], area.width)
            draw_line(buffer, input_x, area.y, [Span(text, input_style)], area.right - input_x)
            if area.height > 1:
                buffer.set_string(area.x, area.y + 1, overline, accent)
            cursor_at = (input_x + cursor_offset, area.y)
        else:
            draw_line(buffer, area.x, area.y, [Span(text, input_style)], area.width)
            if area.height > 1:
                draw_line(buffer, area.x, area.y + 1, [label, Span(overline, accent)], area.width)
            cursor_at = (area.x + cursor_offset, area.y)

        if self.show_cursor and focused and cursor_at[0] < area.right:
            frame.set_cursor(*cursor_at)


class Panes:
    """Focus group over the areas of a layout, cycled with tab / backtab."""

    KEYS = (Key.tab, Key.backtab)

    def __init__(self, length: int, focus: int | None = None, *, key: Any = None) -> None:
        self.length = length
        self.focus = focus
        self.key = key

    def show(self, ui: Ui, child: Ui, add_contents: Any) -> InnerResponse[Any]:
        state = ui.widget_state("panes", self.key)
        if state.sync(self.focus):
            state.focus_index = self.focus

        before = state.focus_index
        if child.has_focus:
            while (event := ui.input_with_key(self.KEYS, focused=True)) is not None:
                if state.focus_index is None:
                    continue
                if event.key == Key.tab:
                    state.focus_index = min(state.focus_index + 1, max(0, self.length - 1))
                else:
                    state.focus_index = max(0, state.focus_index - 1)

        child.set_focus(state.focus_index)
        inner = add_contents(child)
        return InnerResponse(
            inner,
            Response(changed=state.focus_index != before, value=state.focus_index),
        )


class Popup:
    """Clears its area and draws its contents on top of everything."""

    def show(self, frame: Frame, child: Ui, add_contents: Any) -> InnerResponse[Any]:
        frame.buffer.fill(child.area)
        return InnerResponse(add_contents(child))
