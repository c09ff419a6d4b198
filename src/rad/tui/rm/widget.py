"""Retained-mode widgets.

Widgets are created once and kept for the lifetime of the application.  On
every new state snapshot, a widget rebuilds its properties through its
``on_update`` factory; key events are routed down the tree to the focused
widget, and the messages returned by ``on_event`` callbacks are sent to the
store.  Each widget declares its own properties dataclass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, TypeVar

from rad.tui.buffer import Frame, Rect
from rad.tui.event import KeyEvent
from rad.tui.im.context import Context
from rad.tui.im.widget import draw_line, text_lines
from rad.tui.keys import Key
from rad.tui.layout import Constraint, Layout
from rad.tui.style import DEFAULT_THEME, PLAIN, Span, Style, Theme
from rad.tui.utils import visible_width

logger = logging.getLogger(__name__)

S = TypeVar("S")
P = TypeVar("P")

EventCallback = Callable[[KeyEvent, "Widget[Any, Any]"], Any]


class Widget(Generic[S, P]):
    """Base class of retained widgets.

    Subclasses set ``props_type`` and override ``handle_key``, ``render``
    and, for containers, ``children`` / ``focused_child``.
    """

    props_type: type = object

    def __init__(self, props: P | None = None) -> None:
        self.props: P = props if props is not None else self.props_type()
        self.theme: Theme = DEFAULT_THEME
        self._on_update: Callable[[S], P] | None = None
        self._on_event: EventCallback | None = None

    # -- configuration ------------------------------------------------------

    def on_update(self, callback: Callable[[S], P]) -> Widget[S, P]:
        self._on_update = callback
        return self

    def on_event(self, callback: EventCallback) -> Widget[S, P]:
        self._on_event = callback
        return self

    # -- tree ---------------------------------------------------------------

    def children(self) -> list[Widget[S, Any]]:
        return []

    def focused_child(self) -> Widget[S, Any] | None:
        return None

    # -- lifecycle ----------------------------------------------------------

    def update(self, state: S) -> None:
        if self._on_update is not None:
            props = self._on_update(state)
            if not isinstance(props, self.props_type):
                raise TypeError(
                    f"{type(self).__name__} expects {self.props_type.__name__}, "
                    f"got {type(props).__name__}"
                )
            self.props = props
        for child in self.children():
            child.update(state)

    def handle_event(self, event: KeyEvent) -> list[Any]:
        """Handle *event* here and in the focused child; returns messages."""
        messages: list[Any] = []
        child = self.focused_child()
        if child is not None:
            messages.extend(child.handle_event(event))

        message = self.handle_key(event)
        if message is not None:
            messages.append(message)
        if self._on_event is not None:
            message = self._on_event(event, self)
            if message is not None:
                messages.append(message)
        return messages

    def handle_key(self, event: KeyEvent) -> Any:
        return None

    def view_state(self) -> Any:
        return None

    def render(self, frame: Frame, area: Rect, focus: bool) -> None:
        """Draw into *area*.  The base widget draws nothing."""


# ---------------------------------------------------------------------------
# Leaf widgets
# ---------------------------------------------------------------------------


@dataclass
class LabelProps:
    text: str = ""
    style: Style = PLAIN


class Label(Widget[Any, LabelProps]):
    props_type = LabelProps

    def render(self, frame: Frame, area: Rect, focus: bool) -> None:
        for offset, line in enumerate(text_lines(self.props.text)):
            if offset >= area.height:
                break
            draw_line(frame.buffer, area.x, area.y + offset, line, area.width, style=self.props.style)


@dataclass
class TextAreaProps:
    content: str = ""
    can_scroll: bool = True
    show_scrollbar: bool = True


class TextArea(Widget[Any, TextAreaProps]):
    """Multi-line text, scrollable by keyboard when ``can_scroll`` is set."""

    props_type = TextAreaProps

    def __init__(self, props: TextAreaProps | None = None) -> None:
        super().__init__(props)
        self.scroll_row = 0
        self.scroll_col = 0
        self.height = 0
        self.width = 0

    def view_state(self) -> tuple[int, int]:
        return self.scroll_row, self.scroll_col

    def update(self, state: Any) -> None:
        super().update(state)
        lines = self.props.content.split("\n")
        self.scroll_row = min(self.scroll_row, max(0, len(lines) - self.height))

    def handle_key(self, event: KeyEvent) -> Any:
        if not self.props.can_scroll:
            return None
        lines = self.props.content.split("\n")
        # the height is only known once the widget was rendered
        end = max(0, len(lines) - max(1, self.height))
        key = event.key
        if key in (Key.up, "k"):
            self.scroll_row = max(0, self.scroll_row - 1)
        elif key in (Key.down, "j"):
            self.scroll_row = min(self.scroll_row + 1, end)
        elif key in (Key.left, "h"):
            self.scroll_col = max(0, self.scroll_col - 3)
        elif key in (Key.right, "l"):
            longest = max((visible_width(line) for line in lines), default=0)
            self.scroll_col = min(self.scroll_col + 3, max(0, longest - self.width))
        elif key == Key.page_up:
            self.scroll_row = max(0, self.scroll_row - self.height)
        elif key == Key.page_down:
            self.scroll_row = min(self.scroll_row + self.height, end)
        elif key == Key.home:
            self.scroll_row = 0
        elif key == Key.end:
            self.scroll_row = end
        return None

    def render(self, frame: Frame, area: Rect, focus: bool) -> None:
        lines = text_lines(self.props.content)
        scrollbar = self.props.show_scrollbar and len(lines) > area.height
        text_area = Rect(area.x, area.y, area.width - (1 if scrollbar else 0), area.height)
        self.height = text_area.height
        self.width = text_area.width

        for i in range(text_area.height):
            index = self.scroll_row + i
            if index >= len(lines):
                break
            draw_line(
                frame.buffer, text_area.x, text_area.y + i,
                lines[index], text_area.width, skip=self.scroll_col,
            )

        if scrollbar and area.height > 0:
            max_offset = max(1, len(lines) - area.height)
            position = min(self.scroll_row, max_offset) * (area.height - 1) // max_offset
            style = PLAIN if focus else self.theme.dim
            frame.buffer.set_string(text_area.right, area.y + position, "┃", style)


@dataclass
class ShortcutsProps:
    shortcuts: list[tuple[str, str]] = field(default_factory=list)
    divider: str = "∙"


class Shortcuts(Widget[Any, ShortcutsProps]):
    props_type = ShortcutsProps

    def render(self, frame: Frame, area: Rect, focus: bool) -> None:
        if area.is_empty():
            return
        spans: list[Span] = []
        for i, (short, action) in enumerate(self.props.shortcuts):
            if i > 0:
                spans.append(Span(f" {self.props.divider} ", self.theme.dim))
            spans.append(Span(short, self.theme.shortcut))
            spans.append(Span(" "))
            spans.append(Span(action, self.theme.shortcut_description))
        draw_line(frame.buffer, area.x, area.y, spans, area.width)


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass
class PageProps:
    shortcuts_height: int = 1


class Page(Widget[Any, PageProps]):
    """Content above a line of shortcuts; events go to the content."""

    props_type = PageProps

    def __init__(
        self,
        content: Widget[Any, Any] | None = None,
        shortcuts: Widget[Any, Any] | None = None,
        props: PageProps | None = None,
    ) -> None:
        super().__init__(props)
        self.content = content
        self.shortcuts = shortcuts

    def children(self) -> list[Widget[Any, Any]]:
        return [w for w in (self.content, self.shortcuts) if w is not None]

    def focused_child(self) -> Widget[Any, Any] | None:
        return self.content

    def render(self, frame: Frame, area: Rect, focus: bool) -> None:
        shortcuts_height = self.props.shortcuts_height if self.shortcuts is not None else 0
        content_area, shortcuts_area = Layout.vertical(
            [Constraint.min(1), Constraint.length(shortcuts_height)],
            horizontal_margin=1,
        ).split(area)
        if self.content is not None:
            self.content.render(frame, content_area, focus)
        if self.shortcuts is not None:
            self.shortcuts.render(frame, shortcuts_area, False)


@dataclass
class WindowProps:
    current_page: Hashable = None


class Window(Widget[Any, WindowProps]):
    """Switches between pages; only the current page sees state and events."""

    props_type = WindowProps

    def __init__(self, props: WindowProps | None = None) -> None:
        super().__init__(props)
        self.pages: dict[Hashable, Widget[Any, Any]] = {}

    def page(self, page_id: Hashable, page: Widget[Any, Any]) -> Window:
        self.pages[page_id] = page
        return self

    def current(self) -> Widget[Any, Any] | None:
        return self.pages.get(self.props.current_page)

    def children(self) -> list[Widget[Any, Any]]:
        page = self.current()
        return [page] if page is not None else []

    def focused_child(self) -> Widget[Any, Any] | None:
        return self.current()

    def render(self, frame: Frame, area: Rect, focus: bool) -> None:
        page = self.current()
        if page is not None:
            page.render(frame, area, True)


def _apply_theme(widget: Widget[Any, Any], theme: Theme) -> None:
    widget.theme = theme
    if isinstance(widget, Window):
        for page in widget.pages.values():
            _apply_theme(page, theme)
        return
    for child in widget.children():
        _apply_theme(child, theme)


class RetainedView:
    """Drives a retained widget tree from the frame context.

    The tree is updated whenever a new state snapshot arrives, then every
    pending key event is routed through it, then it renders.
    """

    def __init__(self, root: Widget[Any, Any]) -> None:
        self.root = root
        self._state: Any = None
        self._seen_state = False

    def draw(self, ctx: Context[Any], frame: Frame) -> None:
        if not self._seen_state or ctx.state is not self._state:
            _apply_theme(self.root, ctx.theme)
            logger.debug("Updating widget tree from new state")
            self.root.update(ctx.state)
            self._state = ctx.state
            self._seen_state = True

        for event in list(ctx.inputs.unclaimed()):
            if not isinstance(event, KeyEvent):
                continue
            ctx.inputs.claim(event)
            for message in self.root.handle_event(event):
                ctx.send(message)

        self.root.render(frame, ctx.area, True)
