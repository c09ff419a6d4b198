"""The ``Ui`` builder walked by immediate-mode applications every frame.

A :class:`Ui` owns an area and a layout.  Every widget call takes the next
area of that layout in declaration order; the index of that area, appended
to the path of the enclosing ``Ui``, is the widget's identity (unless the
caller passes an explicit ``key``).  The identity is what ties a widget to
its :class:`~rad.tui.im.context.WidgetState` from one frame to the next.

Input is handed out in two ways.  Focus-targeted calls
(:meth:`Ui.input_with_key` and the built-in widgets) are offered the first
unclaimed event right away.  Global handlers (:meth:`Ui.input_global`) are
deferred until the whole frame has been composed and then see whatever is
left, so a focused widget always wins over a global shortcut.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Sequence, TypeVar

from rad.tui.buffer import Frame, Rect
from rad.tui.event import Event, KeyEvent, PasteEvent
from rad.tui.im.context import Context, WidgetId, WidgetState
from rad.tui.im.widget import (
    Bar,
    Borders,
    Column,
    Columns,
    InnerResponse,
    Label,
    Panes,
    Popup,
    Response,
    Separator,
    Shortcuts,
    Table,
    TextEdit,
    TextView,
    Widget,
)
from rad.tui.keys import KeyMatcher, key_matches
from rad.tui.layout import Constraint, Layout, fill
from rad.tui.style import Style, Theme

logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")


class Ui(Generic[S]):
    def __init__(
        self,
        ctx: Context[S],
        area: Rect,
        layout: Any = None,
        *,
        focus_area: int | None = None,
        has_focus: bool = True,
        path: WidgetId = (),
    ) -> None:
        self.ctx = ctx
        self.area = area
        self._layout = layout
        self.focus_area = focus_area
        self.has_focus = has_focus
        self.path = path
        self.count = 0
        self._areas: list[Rect] | None = None

    @property
    def theme(self) -> Theme:
        return self.ctx.theme

    @property
    def state(self) -> S:
        """The state snapshot this frame is rendered from."""
        return self.ctx.state

    # -- areas and focus ----------------------------------------------------

    def _split(self) -> list[Rect]:
        if self._areas is None:
            self._areas = list(self._layout.split(self.area)) if self._layout is not None else []
        return self._areas

    def next_area(self) -> tuple[Rect, bool]:
        """Take the next area of the layout; ``(Rect(), False)`` when exhausted."""
        areas = self._split()
        focused = self.has_focus and self.focus_area == self.count
        rect = areas[self.count] if self.count < len(areas) else Rect()
        self.count += 1
        return rect, focused

    def current_area(self) -> tuple[Rect, bool]:
        """The area most recently handed out by :meth:`next_area`."""
        index = max(0, self.count - 1)
        areas = self._split()
        rect = areas[index] if index < len(areas) else Rect()
        return rect, self.has_focus and self.focus_area == index

    def is_area_focused(self) -> bool:
        return self.focus_area is not None and max(0, self.count - 1) == self.focus_area

    def set_focus(self, index: int | None) -> None:
        self.focus_area = index

    def focus_next(self) -> None:
        self.focus_area = 0 if self.focus_area is None else self.focus_area + 1

    # -- widget identity ----------------------------------------------------

    def widget_id(self, key: Any = None) -> WidgetId:
        """Identity of the widget owning the current area."""
        if key is not None:
            return self.path + (f"#{key}",)
        return self.path + (max(0, self.count - 1),)

    def widget_state(self, kind: str, key: Any = None) -> WidgetState:
        """Persistent state of the widget owning the current area."""
        state = self.ctx.memory.visit(self.widget_id(key), kind, self.ctx.frame_index)
        state.focused = self.has_focus and self.is_area_focused()
        return state

    # -- input --------------------------------------------------------------

    def next_input(
        self,
        accept: Callable[[Event], bool],
        *,
        focused: bool | None = None,
    ) -> Event | None:
        """Claim the first unclaimed event if the current area is focused
        and *accept* returns true for it."""
        if focused is None:
            focused = self.has_focus and self.is_area_focused()
        if not focused:
            return None
        event = self.ctx.inputs.first_unclaimed()
        if event is None or not accept(event):
            return None
        self.ctx.inputs.claim(event)
        return event

    def input_with_key(
        self,
        matcher: KeyMatcher = None,
        *,
        focused: bool | None = None,
    ) -> KeyEvent | None:
        event = self.next_input(
            lambda e: isinstance(e, KeyEvent) and key_matches(e.key, matcher),
            focused=focused,
        )
        return event  # type: ignore[return-value]

    def input(self, matcher: KeyMatcher) -> bool:
        return self.input_with_key(matcher) is not None

    def input_paste(self) -> str | None:
        event = self.next_input(lambda e: isinstance(e, PasteEvent))
        return event.text if isinstance(event, PasteEvent) else None

    def input_global(
        self, matcher: KeyMatcher, on_match: Callable[[KeyEvent], Any]
    ) -> None:
        """Call *on_match* for a key nobody else claims this frame."""
        if self.has_focus:
            self.ctx.add_global_handler(matcher, on_match)

    def on_key(self, matcher: KeyMatcher, message: Any) -> None:
        """Send *message* for a key nobody else claims this frame."""
        self.input_global(matcher, lambda _: self.send_message(message))

    def send_message(self, message: Any) -> bool:
        return self.ctx.send(message)

    # -- composition --------------------------------------------------------

    def add(self, frame: Frame, widget: Widget) -> Response:
        return widget.ui(self, frame)

    def child_ui(
        self,
        area: Rect,
        layout: Any,
        *,
        path: WidgetId,
        has_focus: bool = False,
        focus_area: int | None = None,
    ) -> Ui[S]:
        return Ui(
            self.ctx,
            area,
            layout,
            focus_area=focus_area,
            has_focus=has_focus,
            path=path,
        )

    def layout(
        self,
        layout: Any,
        focus: int | None,
        add_contents: Callable[[Ui[S]], R],
        *,
        key: Any = None,
    ) -> InnerResponse[R]:
        """Split the next area with *layout* and build its contents."""
        area, focused = self.next_area()
        child = self.child_ui(
            area, layout, path=self.widget_id(key), has_focus=focused, focus_area=focus
        )
        return InnerResponse(add_contents(child))

    def panes(
        self,
        layout: Any,
        add_contents: Callable[[Ui[S]], R],
        *,
        focus: int | None = 0,
        key: Any = None,
    ) -> InnerResponse[R]:
        """Like :meth:`layout`, with focus moved between areas by tab / backtab.

        *focus* is the focus held by the application, adopted whenever it
        changes; the response value is the focus after this frame.
        """
        area, focused = self.next_area()
        child = self.child_ui(area, layout, path=self.widget_id(key), has_focus=focused)
        return Panes(len(layout), focus, key=key).show(self, child, add_contents)

    def popup(
        self,
        frame: Frame,
        layout: Any,
        add_contents: Callable[[Ui[S]], R],
        *,
        key: Any = "popup",
    ) -> InnerResponse[R]:
        """Draw *add_contents* over the first area of *layout*, focused."""
        areas = layout.split(self.area)
        area = areas[0] if areas else self.area
        child = self.child_ui(
            area, fill(), path=self.path + (f"#{key}",), has_focus=True, focus_area=0
        )
        return Popup().show(frame, child, add_contents)

    # -- widget builders ----------------------------------------------------

    def label(self, frame: Frame, content: Any, style: Style | None = None) -> Response:
        if style is None:
            return Label(content).ui(self, frame)
        return Label(content, style).ui(self, frame)

    def separator(self, frame: Frame) -> Response:
        return Separator().ui(self, frame)

    def overline(self, frame: Frame) -> Response:
        return Separator("▔").ui(self, frame)

    def columns(
        self, frame: Frame, columns: Sequence[Column], borders: Borders | None = None
    ) -> Response:
        return Columns(columns, borders).ui(self, frame)

    def bar(
        self, frame: Frame, columns: Sequence[Column], borders: Borders | None = None
    ) -> Response:
        return Bar(columns, borders).ui(self, frame)

    def table(
        self,
        frame: Frame,
        items: Sequence[Any],
        columns: Sequence[Column],
        selected: int | None = None,
        *,
        empty_message: str | None = None,
        borders: Borders | None = None,
        key: Any = None,
    ) -> Response:
        return Table(
            items, columns, selected,
            empty_message=empty_message, borders=borders, key=key,
        ).ui(self, frame)

    def headered_table(
        self,
        frame: Frame,
        items: Sequence[Any],
        header: Sequence[Column],
        selected: int | None = None,
        *,
        empty_message: str | None = None,
        key: Any = None,
    ) -> Response:
        """A header row with top borders over a table closed at the bottom."""
        area, focused = self.next_area()
        child = self.child_ui(
            area,
            Layout.vertical([Constraint.length(3), Constraint.min(1)]),
            path=self.widget_id(key),
            has_focus=focused,
            focus_area=1,
        )
        child.columns(frame, header, Borders.TOP)
        return child.table(
            frame, items, header, selected,
            empty_message=empty_message, borders=Borders.BOTTOM_SIDES,
        )

    def shortcuts(
        self, frame: Frame, shortcuts: Sequence[tuple[str, str]], divider: str = "∙"
    ) -> Response:
        return Shortcuts(shortcuts, divider).ui(self, frame)

    def text_view(
        self,
        frame: Frame,
        text: Any,
        scroll: tuple[int, int] | None = None,
        borders: Borders | None = None,
        *,
        key: Any = None,
    ) -> Response:
        return TextView(text, scroll, borders, key=key).ui(self, frame)

    def text_edit(
        self,
        frame: Frame,
        text: str = "",
        cursor: int | None = None,
        *,
        label: str | None = None,
        borders: Borders | None = None,
        key: Any = None,
    ) -> Response:
        return TextEdit(text, cursor, label=label, borders=borders, key=key).ui(self, frame)


class Window:
    """Root of an immediate-mode frame: one area covering the whole frame."""

    def __init__(self, focus: int | None = 0) -> None:
        self.focus = focus

    def show(
        self, ctx: Context[S], add_contents: Callable[[Ui[S]], R]
    ) -> InnerResponse[R]:
        ui: Ui[S] = Ui(
            ctx,
            ctx.area,
            Layout.horizontal([Constraint.min(1)]),
            focus_area=self.focus,
            has_focus=True,
        )
        return InnerResponse(add_contents(ui))
