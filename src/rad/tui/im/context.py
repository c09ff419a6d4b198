"""Per-frame render context and the per-widget memory that outlives frames.

A :class:`Context` is built by the frontend for every frame.  It carries the
state snapshot the frame is rendered from, the handle used to emit messages,
the pending input of this frame and the :class:`WidgetMemory` side table
in which widgets keep their derived state (scroll offset, measured size,
focus, cursor) between frames.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, TypeVar

from rad.tui.buffer import Rect
from rad.tui.channel import Sender, send_quietly
from rad.tui.event import Event, KeyEvent
from rad.tui.keys import KeyMatcher, key_matches
from rad.tui.style import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

S = TypeVar("S")

WidgetId = tuple

DEFAULT_MEMORY_LIMIT = 4096


# ---------------------------------------------------------------------------
# Pending input
# ---------------------------------------------------------------------------


class InputQueue:
    """Input events collected for one frame.

    Widgets are only ever offered the first unclaimed event.  Claiming is
    exclusive: a claimed event is never offered to anyone else.  What is
    still unclaimed when the frame ends is dropped by :meth:`end_frame`.
    """

    def __init__(self, events: list[Event] | None = None) -> None:
        self._events: list[Event] = list(events or [])
        self._claimed: list[bool] = [False] * len(self._events)

    def push(self, event: Event) -> None:
        self._events.append(event)
        self._claimed.append(False)

    def first_unclaimed(self) -> Event | None:
        for event, claimed in zip(self._events, self._claimed):
            if not claimed:
                return event
        return None

    def unclaimed(self) -> Iterator[Event]:
        for event, claimed in zip(self._events, self._claimed):
            if not claimed:
                yield event

    def claim(self, event: Event) -> None:
        """Mark *event* (the very object handed out) as consumed."""
        for i, candidate in enumerate(self._events):
            if candidate is event and not self._claimed[i]:
                self._claimed[i] = True
                return
        raise ValueError(f"event not pending: {event!r}")

    def end_frame(self) -> list[Event]:
        """Empty the queue, returning the events nobody claimed."""
        dropped = list(self.unclaimed())
        self._events.clear()
        self._claimed.clear()
        return dropped

    def __len__(self) -> int:
        return self._claimed.count(False)


# ---------------------------------------------------------------------------
# Widget memory
# ---------------------------------------------------------------------------


@dataclass
class WidgetState:
    """Derived state a widget keeps across frames.

    ``synced`` is the last value the application passed in for a controlled
    widget; local changes win until the application passes a different one.
    """

    kind: str = ""
    scroll_row: int = 0
    scroll_col: int = 0
    height: int = 0
    width: int = 0
    focused: bool = False
    cursor: int = 0
    selected: int | None = None
    focus_index: int | None = None
    text: str = ""
    synced: Any = None
    initialized: bool = False
    last_frame: int = -1

    def sync(self, value: Any) -> bool:
        """Record an application-provided *value*.

        Returns ``True`` the first time and whenever it differs from the
        previously provided one, i.e. when the widget should adopt it.
        """
        if self.initialized and value == self.synced:
            return False
        self.synced = value
        self.initialized = True
        return True


class WidgetMemory:
    """Side table from :data:`WidgetId` to :class:`WidgetState`.

    Entries are created lazily and never destroyed explicitly; once more
    than *limit* identities are known the least recently visited is evicted.
    """

    def __init__(self, limit: int = DEFAULT_MEMORY_LIMIT) -> None:
        self.limit = max(1, limit)
        self._states: OrderedDict[WidgetId, WidgetState] = OrderedDict()

    def visit(self, widget_id: WidgetId, kind: str, frame: int) -> WidgetState:
        """Look up (or create) the state of *widget_id* for this frame.

        A state created by a different kind of widget is replaced: the
        identity now denotes another widget.
        """
        state = self._states.get(widget_id)
        if state is not None and state.kind != kind:
            logger.debug(
                "Widget %r changed from %s to %s, resetting", widget_id, state.kind, kind
            )
            state = None

        if state is None:
            state = WidgetState(kind=kind)
            self._states[widget_id] = state
            self._evict()
        else:
            if state.last_frame == frame:
                logger.debug("Duplicate widget id %r in frame %d", widget_id, frame)
            self._states.move_to_end(widget_id)

        state.last_frame = frame
        return state

    def get(self, widget_id: WidgetId) -> WidgetState | None:
        return self._states.get(widget_id)

    def _evict(self) -> None:
        while len(self._states) > self.limit:
            widget_id, _ = self._states.popitem(last=False)
            logger.debug("Evicted state of widget %r", widget_id)

    def __contains__(self, widget_id: object) -> bool:
        return widget_id in self._states

    def __len__(self) -> int:
        return len(self._states)


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@dataclass
class GlobalHandler:
    matcher: KeyMatcher
    callback: Callable[[KeyEvent], Any]


class Context(Generic[S]):
    """Everything a frame is rendered from."""

    def __init__(
        self,
        state: S,
        sender: Sender[Any] | None = None,
        *,
        area: Rect | None = None,
        theme: Theme = DEFAULT_THEME,
        inputs: InputQueue | None = None,
        memory: WidgetMemory | None = None,
        frame_index: int = 0,
        shutting_down: bool = False,
    ) -> None:
        self.state = state
        self.sender = sender
        self.area = area if area is not None else Rect()
        self.theme = theme
        self.inputs = inputs if inputs is not None else InputQueue()
        self.memory = memory if memory is not None else WidgetMemory()
        self.frame_index = frame_index
        self.shutting_down = shutting_down
        self._global_handlers: list[GlobalHandler] = []

    @property
    def frame_size(self) -> Rect:
        return self.area

    def send(self, message: Any) -> bool:
        """Emit *message* to the store.  Returns ``False`` if it was dropped."""
        if self.sender is None:
            logger.debug("No sender, dropping message %r", message)
            return False
        return send_quietly(self.sender, message, shutting_down=self.shutting_down)

    def store_input(self, event: Event) -> None:
        self.inputs.push(event)

    def add_global_handler(
        self, matcher: KeyMatcher, callback: Callable[[KeyEvent], Any]
    ) -> None:
        self._global_handlers.append(GlobalHandler(matcher, callback))

    def run_global_handlers(self) -> int:
        """Offer unclaimed key events to the global handlers.

        Events are visited in arrival order; for each, handlers are tried in
        declaration order and the first match claims it.  Returns the number
        of events handled.
        """
        handled = 0
        for event in list(self.inputs.unclaimed()):
            if not isinstance(event, KeyEvent):
                continue
            for handler in self._global_handlers:
                if key_matches(event.key, handler.matcher):
                    self.inputs.claim(event)
                    handler.callback(event)
                    handled += 1
                    break
        self._global_handlers.clear()
        return handled

    def end_frame(self) -> list[Event]:
        """Drop unclaimed input; returns what was dropped."""
        dropped = self.inputs.end_frame()
        if dropped:
            logger.debug("Dropped %d unclaimed input event(s)", len(dropped))
        return dropped
