"""Termination signalling shared by the store and the frontend.

A :class:`Terminator` carries the first :class:`Interrupted` reason that is
reported, either by the store (the reducer returned an ``Exit``) or by an
OS signal.  Every later report is ignored: termination happens once.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

_TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass(frozen=True)
class Interrupted:
    """Why the application stopped.

    ``by_signal`` is set for OS signals (and ``ctrl+c``); otherwise the
    reducer requested the exit and ``payload`` is its return value.
    """

    by_signal: bool
    payload: Any = None

    @classmethod
    def os_signal(cls) -> Interrupted:
        return cls(by_signal=True)

    @classmethod
    def user(cls, payload: Any = None) -> Interrupted:
        return cls(by_signal=False, payload=payload)


class Terminator:
    """Broadcasts a single termination reason to its subscribers."""

    def __init__(self) -> None:
        self._reason: Interrupted | None = None
        self._subscribers: list[Callable[[Interrupted], None]] = []
        self._event: asyncio.Event | None = None

    @property
    def reason(self) -> Interrupted | None:
        return self._reason

    @property
    def terminated(self) -> bool:
        return self._reason is not None

    def subscribe(self, callback: Callable[[Interrupted], None]) -> None:
        """Call *callback* on termination (immediately if already terminated)."""
        if self._reason is not None:
            callback(self._reason)
            return
        self._subscribers.append(callback)

    def terminate(self, interrupted: Interrupted) -> bool:
        """Report *interrupted*.  Returns ``False`` if already terminated."""
        if self._reason is not None:
            logger.debug("Ignoring termination %r, already %r", interrupted, self._reason)
            return False

        self._reason = interrupted
        logger.info("Received interrupt: %r", interrupted)
        if self._event is not None:
            self._event.set()
        for callback in self._subscribers:
            callback(interrupted)
        self._subscribers.clear()
        return True

    async def wait(self) -> Interrupted:
        if self._reason is not None:
            return self._reason
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()
        assert self._reason is not None
        return self._reason


def install_signal_handlers(
    terminator: Terminator,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Callable[[], None]:
    """Route SIGINT/SIGTERM into *terminator*.

    Returns a callable that removes the handlers again and reinstates the
    Python-level handlers that were in place before.  Handlers registered
    through ``loop.add_signal_handler`` are taken over and not reinstated.
    On loops without signal support (e.g. not the main thread) nothing is
    installed.
    """
    if loop is None:
        loop = asyncio.get_running_loop()

    installed: list[tuple[int, Any]] = []

    def _on_signal() -> None:
        terminator.terminate(Interrupted.os_signal())

    for signum in _TERMINATION_SIGNALS:
        previous = signal.getsignal(signum)
        try:
            loop.add_signal_handler(signum, _on_signal)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug("Cannot install handler for signal %s", signum)
            continue
        # another loop handler leaves only the loop's wakeup stub behind
        if previous is signal.getsignal(signum):
            previous = None
        installed.append((signum, previous))

    def _uninstall() -> None:
        for signum, previous in installed:
            try:
                loop.remove_signal_handler(signum)
            except (NotImplementedError, RuntimeError, ValueError):
                continue
            if previous is not None:
                signal.signal(signum, previous)
        installed.clear()

    return _uninstall
