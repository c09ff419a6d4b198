"""Exception types raised by the framework."""

from __future__ import annotations


class TuiError(Exception):
    """Base class for all framework errors."""


class TerminalError(TuiError):
    """Terminal I/O failed (raw mode setup/teardown or a write).

    Always fatal: it propagates out of ``run`` after the terminal has been
    restored on a best-effort basis.
    """


class ChannelClosed(TuiError):
    """A message was sent after the receiving side was dropped."""


class ReceiverTaken(TuiError):
    """The single receiver of a channel was requested a second time."""
