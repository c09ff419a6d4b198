"""File logging for TUI applications.

The terminal is owned by the renderer while an application runs, so log
records cannot go to stdout or stderr.  ``enable`` routes everything logged
under ``rad.tui`` into a file instead.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "rad.tui"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_handler: logging.Handler | None = None


def enable(path: str, level: str = "info") -> logging.Logger:
    """Attach a file handler for *path* to the framework logger.

    Calling it again replaces the previous handler.
    """
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler.close()

    _handler = logging.FileHandler(path, encoding="utf-8")
    _handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def disable() -> None:
    """Detach the handler installed by :func:`enable`."""
    global _handler

    if _handler is None:
        return
    logger = logging.getLogger(LOGGER_NAME)
    logger.removeHandler(_handler)
    _handler.close()
    _handler = None
