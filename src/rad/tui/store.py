"""Application state store.

The :class:`Store` is the only owner of the application state.  It applies
messages one at a time, in the order they are received from the channel,
and publishes a deep copy of the state after every change so that renders
never observe a partially updated state.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar

from rad.tui.channel import Receiver
from rad.tui.task import Interrupted, Terminator

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_TICK_RATE = 1.0


@dataclass
class Exit(Generic[T]):
    """Termination request carrying an optional return value."""

    value: T | None = None


class State(Protocol):
    """An application state that handles its own messages.

    ``update`` is the reducer: it mutates the state in place and returns an
    :class:`Exit` if the message asked the application to quit.  A state may
    also define ``tick()``, which the store calls on every store tick.
    """

    def update(self, message: Any) -> Exit[Any] | None: ...


class Store:
    """Drains the message channel into the state, one message at a time."""

    def __init__(
        self,
        publish: Callable[[Any], None],
        tick_rate: float = STORE_TICK_RATE,
        snapshot: Callable[[Any], Any] = copy.deepcopy,
    ) -> None:
        self._publish = publish
        self._tick_rate = tick_rate
        self._snapshot = snapshot
        self.applied: int = 0

    def _emit(self, state: Any) -> None:
        self._publish(self._snapshot(state))

    async def run(
        self,
        state: State,
        receiver: Receiver[Any],
        terminator: Terminator,
    ) -> Interrupted | None:
        """Apply messages until the reducer exits or the channel closes.

        Returns the ``Interrupted`` reason reported to *terminator*, or
        ``None`` if the channel was closed first.
        """
        # Publish the initial state once
        self._emit(state)

        tick = getattr(state, "tick", None)
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._tick_rate

        while True:
            # Ticks follow a fixed schedule, however busy the channel is
            now = loop.time()
            if now >= next_tick:
                next_tick += self._tick_rate
                if next_tick <= now:
                    # missed ticks are skipped, not replayed
                    next_tick = now + self._tick_rate
                if callable(tick):
                    tick()
                    self._emit(state)

            if not await receiver.wait(next_tick - loop.time()):
                continue

            message = receiver.try_recv()
            if message is None:
                logger.debug("Store stopped: channel closed")
                return None

            exit_ = state.update(message)
            self.applied += 1

            if exit_ is not None:
                interrupted = Interrupted.user(exit_.value)
                terminator.terminate(interrupted)
                return interrupted

            self._emit(state)


class StateValue(Generic[T]):
    """A value with a pending write buffer.

    Reading returns the buffered value if there is one, otherwise the
    committed value.  ``apply`` commits the buffer, ``reset`` discards it.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._buffer: T | None = None
        self._buffered = False

    def apply(self) -> None:
        if self._buffered:
            self._value = self._buffer  # type: ignore[assignment]
        self.reset()

    def reset(self) -> None:
        self._buffer = None
        self._buffered = False

    def write(self, value: T) -> None:
        self._buffer = value
        self._buffered = True

    def read(self) -> T:
        if self._buffered:
            return self._buffer  # type: ignore[return-value]
        return self._value
