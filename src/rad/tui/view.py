"""The rendering capability shared by both composition strategies.

The frontend only knows how to ask a :class:`View` to draw a frame from a
:class:`~rad.tui.im.context.Context`.  Immediate-mode applications are
adapted by :class:`ImmediateView`; the retained widget tree in
:mod:`rad.tui.rm` provides its own.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, Union

from rad.tui.buffer import Frame
from rad.tui.event import Event
from rad.tui.im.context import Context

logger = logging.getLogger(__name__)


class View(Protocol):
    def draw(self, ctx: Context[Any], frame: Frame) -> None: ...


class Show(Protocol):
    """An immediate-mode application."""

    def show(self, ctx: Context[Any], frame: Frame) -> None: ...


ShowFn = Callable[[Context[Any], Frame], None]


class ImmediateView:
    """Adapts an object with ``show(ctx, frame)``, or such a function."""

    def __init__(self, app: Union[Show, ShowFn]) -> None:
        self.app = app

    def draw(self, ctx: Context[Any], frame: Frame) -> None:
        show = getattr(self.app, "show", None)
        if callable(show):
            show(ctx, frame)
        else:
            self.app(ctx, frame)  # type: ignore[operator]


def compose_frame(view: View, ctx: Context[Any], frame: Frame) -> list[Event]:
    """Run one composition pass.

    Draws the view, then offers what is left of the input to the global
    handlers declared during drawing, then drops the rest.  Returns the
    dropped events.  A failing draw is logged and the frame is still
    finished.
    """
    try:
        view.draw(ctx, frame)
    except Exception as exc:
        logger.warning("Drawing failed: %s", exc, exc_info=True)
    ctx.run_global_handlers()
    return ctx.end_frame()
