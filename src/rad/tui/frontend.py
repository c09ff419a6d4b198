"""The frontend: terminal ownership, the render loop and shutdown.

``run`` starts the store on its own task and then loops on a single inbox
fed by the terminal input handler, the resize handler and the store's
publisher.  Every wake-up (one inbox item, or the render tick when nothing
arrived) is followed by one composition pass from the latest snapshot and a
commit to the terminal.

Termination is reported once through a :class:`~rad.tui.task.Terminator`:
by the reducer returning ``Exit``, by SIGINT/SIGTERM, or by ``ctrl+c``.
Whatever the cause (errors included) the channel is closed, the store task
is stopped and the terminal is restored exactly once.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Union

from rad.tui import log
from rad.tui.buffer import Buffer, Frame
from rad.tui.channel import Channel, Sender, send_quietly
from rad.tui.config import Config
from rad.tui.event import Event, KeyEvent, PasteEvent, ResizeEvent, key_event
from rad.tui.im.context import Context, InputQueue, WidgetMemory
from rad.tui.input_buffer import PASTE_END, PASTE_START, split_sequences
from rad.tui.keys import Key
from rad.tui.rm.widget import RetainedView, Widget
from rad.tui.store import State, Store
from rad.tui.style import DEFAULT_THEME, Theme
from rad.tui.task import Interrupted, Terminator, install_signal_handlers
from rad.tui.terminal import ProcessTerminal, Terminal, TerminalSession
from rad.tui.view import ImmediateView, Show, ShowFn, View, compose_frame
from rad.tui.viewport import Viewport

logger = logging.getLogger(__name__)

# Maps an input event to an application message, or ``None`` to hand the
# event to the widgets of the next frame instead.
InputMap = Callable[[Event], Any]


class LoopState(enum.Enum):
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


@dataclass
class _Snapshot:
    state: Any


def parse_input(data: str) -> list[Event]:
    """Turn one chunk of raw terminal input into events.

    A bracketed paste becomes a single :class:`PasteEvent`; anything else
    is split into escape sequences and characters.  Unknown sequences are
    skipped.
    """
    if data.startswith(PASTE_START) and data.endswith(PASTE_END):
        return [PasteEvent(data[len(PASTE_START):-len(PASTE_END)])]

    sequences, rest = split_sequences(data)
    if rest:
        sequences.append(rest)

    events: list[Event] = []
    for sequence in sequences:
        event = key_event(sequence)
        if event is None:
            logger.debug("Ignoring unknown input %r", sequence)
            continue
        events.append(event)
    return events


class Frontend:
    """Drives one application run on a terminal."""

    def __init__(
        self,
        view: View,
        *,
        viewport: Viewport | None = None,
        terminal: Terminal | None = None,
        config: Config | None = None,
        input_map: InputMap | None = None,
        theme: Theme = DEFAULT_THEME,
    ) -> None:
        self.config = config if config is not None else Config()
        self.view = view
        self.viewport = viewport if viewport is not None else Viewport.inline(self.config.inline_height)
        self.terminal = terminal if terminal is not None else ProcessTerminal(self.config.write_log)
        self.input_map = input_map
        self.theme = theme

        self.state = LoopState.STARTING
        self.frames = 0
        self.memory = WidgetMemory(self.config.widget_memory_limit)
        self._inputs = InputQueue()
        self._inbox: deque[Union[Event, _Snapshot]] = deque()
        self._wake: asyncio.Event | None = None
        self._snapshot: _Snapshot | None = None
        self._terminator = Terminator()
        self._sender: Sender[Any] | None = None

    # -- producers ----------------------------------------------------------

    def _notify(self) -> None:
        if self._wake is not None:
            self._wake.set()

    def _publish(self, state: Any) -> None:
        self._inbox.append(_Snapshot(state))
        self._notify()

    def _on_input(self, data: str) -> None:
        if self.state is not LoopState.RUNNING:
            return
        for event in parse_input(data):
            if (
                self.config.ctrl_c_interrupts
                and isinstance(event, KeyEvent)
                and event.key == Key.ctrl("c")
            ):
                self._terminator.terminate(Interrupted.os_signal())
                return
            self._inbox.append(event)
        self._notify()

    def _on_resize(self) -> None:
        self._inbox.append(ResizeEvent(self.terminal.columns, self.terminal.rows))
        self._notify()

    # -- frame --------------------------------------------------------------

    def _dispatch(self, item: Union[Event, _Snapshot], session: TerminalSession) -> None:
        if isinstance(item, _Snapshot):
            self._snapshot = item
        elif isinstance(item, ResizeEvent):
            logger.debug("Terminal resized to %dx%d", item.columns, item.rows)
            session.renderer.invalidate()
        elif self.input_map is not None and (message := self.input_map(item)) is not None:
            assert self._sender is not None
            send_quietly(self._sender, message, shutting_down=self._terminator.terminated)
        else:
            self._inputs.push(item)

    def _compose(self, session: TerminalSession) -> None:
        if self._snapshot is None:
            # Nothing to draw before the store published its first state
            return
        area = self.viewport.area(self.terminal.columns, self.terminal.rows)
        frame = Frame(Buffer.empty(area.width, area.height))
        ctx: Context[Any] = Context(
            self._snapshot.state,
            self._sender,
            area=area,
            theme=self.theme,
            inputs=self._inputs,
            memory=self.memory,
            frame_index=self.frames,
            shutting_down=self._terminator.terminated,
        )
        compose_frame(self.view, ctx, frame)
        session.draw(frame)
        self.frames += 1

    # -- loop ---------------------------------------------------------------

    async def _loop(self, session: TerminalSession, store_task: asyncio.Task[Any]) -> None:
        assert self._wake is not None
        tick = self.config.render_tick_rate

        while True:
            if not self._inbox:
                self._wake.clear()
                try:
                    await asyncio.wait_for(self._wake.wait(), timeout=tick)
                except asyncio.TimeoutError:
                    pass

            if store_task.done():
                # Re-raises a reducer exception
                store_task.result()
                return
            if self._terminator.terminated:
                return

            if self._inbox:
                self._dispatch(self._inbox.popleft(), session)
            self._compose(session)

    async def run(self, channel: Channel[Any], state: State) -> Any:
        """Run the application until it exits.

        Returns the value of the reducer's ``Exit``, or ``None`` when
        interrupted by a signal or when the channel was closed.
        """
        config = self.config
        if config.log_file:
            log.enable(config.log_file, config.log_level)

        loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        self._terminator.subscribe(lambda _: self._notify())
        self._sender = channel.sender()
        receiver = channel.receiver()

        session = TerminalSession(self.terminal, self.viewport)
        store = Store(self._publish, tick_rate=config.store_tick_rate)
        store_task: asyncio.Task[Any] | None = None
        uninstall = install_signal_handlers(self._terminator, loop)

        logger.info("Starting frontend (%s viewport)", self.viewport.kind)
        try:
            session.open(self._on_input, self._on_resize)
            self.state = LoopState.RUNNING
            store_task = asyncio.create_task(
                store.run(state, receiver, self._terminator)
            )
            store_task.add_done_callback(lambda _: self._notify())
            await self._loop(session, store_task)
        finally:
            self.state = LoopState.DRAINING
            logger.info("Draining")
            uninstall()
            channel.close()
            if store_task is not None:
                if not store_task.done():
                    store_task.cancel()
                await asyncio.gather(store_task, return_exceptions=True)
            session.close()
            self.state = LoopState.STOPPED
            logger.info("Stopped after %d frame(s)", self.frames)

        interrupted = self._terminator.reason
        if interrupted is None or interrupted.by_signal:
            return None
        return interrupted.payload


def _as_view(app: Any) -> View:
    if isinstance(app, Widget):
        return RetainedView(app)
    if callable(getattr(app, "draw", None)):
        return app
    return ImmediateView(app)


async def run(
    channel: Channel[Any],
    state: State,
    app: Any,
    viewport: Viewport | None = None,
    terminal: Terminal | None = None,
    config: Config | None = None,
    input_map: InputMap | None = None,
    theme: Theme = DEFAULT_THEME,
) -> Any:
    """Run *app* against *state* until the reducer exits.

    *app* is a :class:`~rad.tui.view.View`, a retained root
    :class:`~rad.tui.rm.Widget`, or an immediate-mode application (an
    object with ``show(ctx, frame)`` or such a function).
    """
    frontend = Frontend(
        _as_view(app),
        viewport=viewport,
        terminal=terminal,
        config=config,
        input_map=input_map,
        theme=theme,
    )
    return await frontend.run(channel, state)


async def im(
    channel: Channel[Any],
    state: State,
    app: Union[Show, ShowFn],
    viewport: Viewport | None = None,
    terminal: Terminal | None = None,
    config: Config | None = None,
    input_map: InputMap | None = None,
    theme: Theme = DEFAULT_THEME,
) -> Any:
    """Run an immediate-mode application."""
    return await run(
        channel, state, ImmediateView(app), viewport, terminal, config, input_map, theme
    )
