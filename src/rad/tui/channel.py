"""Message channel between producers (input, widgets, timers) and the store.

A ``Channel`` owns exactly one ``Receiver`` and hands out any number of
``Sender`` handles.  Messages are delivered in FIFO order, each exactly
once.  Once closed, sends raise :class:`ChannelClosed` while the receiver
still drains whatever was queued before the close.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Generic, TypeVar

from rad.tui.errors import ChannelClosed, ReceiverTaken

logger = logging.getLogger(__name__)

M = TypeVar("M")


class _Conduit(Generic[M]):
    """Shared queue state behind a channel's sender and receiver."""

    def __init__(self, maxsize: int) -> None:
        self.maxsize = maxsize
        self.items: deque[M] = deque()
        self.closed = False
        self._readable: asyncio.Event | None = None

    def readable(self) -> asyncio.Event:
        # Created lazily so a channel can be built outside a running loop.
        if self._readable is None:
            self._readable = asyncio.Event()
            if self.items or self.closed:
                self._readable.set()
        return self._readable

    def notify(self) -> None:
        if self._readable is not None:
            self._readable.set()


class Sender(Generic[M]):
    """Sending half of a channel.  Cheap to clone."""

    def __init__(self, conduit: _Conduit[M]) -> None:
        self._conduit = conduit

    @property
    def closed(self) -> bool:
        return self._conduit.closed

    def send(self, message: M) -> None:
        """Queue *message* for the receiver.

        ``None`` is not a message: the receiver reports a closed channel
        with it, so sending it raises ``ValueError``.  Raises
        ``ChannelClosed`` after the channel was closed and
        ``asyncio.QueueFull`` when a bounded channel is at capacity.
        """
        if message is None:
            raise ValueError("None cannot be sent as a message")
        conduit = self._conduit
        if conduit.closed:
            raise ChannelClosed("channel is closed")
        if conduit.maxsize > 0 and len(conduit.items) >= conduit.maxsize:
            raise asyncio.QueueFull
        conduit.items.append(message)
        conduit.notify()

    def clone(self) -> Sender[M]:
        return Sender(self._conduit)


class Receiver(Generic[M]):
    """Receiving half of a channel.  There is only ever one per channel."""

    def __init__(self, conduit: _Conduit[M]) -> None:
        self._conduit = conduit

    def try_recv(self) -> M | None:
        """Return the next queued message without waiting, or ``None``."""
        conduit = self._conduit
        if not conduit.items:
            return None
        message = conduit.items.popleft()
        if not conduit.items and not conduit.closed:
            conduit.readable().clear()
        return message

    async def recv(self) -> M | None:
        """Wait for the next message.

        Returns ``None`` once the channel is closed and fully drained.
        """
        conduit = self._conduit
        while True:
            if conduit.items:
                return self.try_recv()
            if conduit.closed:
                return None
            event = conduit.readable()
            event.clear()
            await event.wait()

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait until a message is queued or the channel is closed.

        Nothing is consumed, so the wait can be abandoned safely.  Returns
        ``False`` if *timeout* passed first.
        """
        conduit = self._conduit
        if conduit.items or conduit.closed:
            return True
        event = conduit.readable()
        event.clear()
        try:
            await asyncio.wait_for(event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._conduit.items)


class Channel(Generic[M]):
    """A bounded (``maxsize > 0``) or unbounded message conduit."""

    def __init__(self, maxsize: int = 0) -> None:
        self._conduit: _Conduit[M] = _Conduit(maxsize)
        self._receiver_taken = False
        self.tx: Sender[M] = Sender(self._conduit)

    @property
    def closed(self) -> bool:
        return self._conduit.closed

    def sender(self) -> Sender[M]:
        return self.tx.clone()

    def receiver(self) -> Receiver[M]:
        """Hand out the receiver.  Raises ``ReceiverTaken`` on a second call."""
        if self._receiver_taken:
            raise ReceiverTaken("channel receiver was already taken")
        self._receiver_taken = True
        return Receiver(self._conduit)

    def close(self) -> None:
        """Refuse new sends.  Already queued messages stay receivable."""
        if self._conduit.closed:
            return
        self._conduit.closed = True
        self._conduit.notify()
        logger.debug(
            "Channel closed with %d pending message(s)",
            len(self._conduit.items),
        )


def send_quietly(sender: Sender[M], message: M, *, shutting_down: bool) -> bool:
    """Send *message*, turning a closed channel into a log diagnostic.

    A closed channel during shutdown is expected and logged at debug level;
    at any other time it points at a logic error and is logged as a warning.
    Returns ``True`` if the message was queued.
    """
    try:
        sender.send(message)
    except ChannelClosed:
        if shutting_down:
            logger.debug("Dropped message during shutdown: %r", message)
        else:
            logger.warning("Message sent after channel was closed: %r", message)
        return False
    return True
