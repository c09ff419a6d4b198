"""Runtime configuration for the frontend, store and renderer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw not in ("0", "false", "no", "off")


@dataclass
class Config:
    """Framework settings.

    Tick rates are in seconds.  ``write_log`` tees every byte written to the
    terminal into a file, ``log_file`` enables framework logging.
    """

    render_tick_rate: float = 0.25
    store_tick_rate: float = 1.0
    inline_height: int = 20
    ctrl_c_interrupts: bool = True
    widget_memory_limit: int = 4096
    write_log: str = ""
    log_file: str = ""
    log_level: str = field(default="info")

    @classmethod
    def from_env(cls) -> Config:
        """Build a config from ``RAD_TUI_*`` environment variables."""
        defaults = cls()
        return cls(
            render_tick_rate=_env_float(
                "RAD_TUI_RENDER_TICK", defaults.render_tick_rate
            ),
            store_tick_rate=_env_float(
                "RAD_TUI_STORE_TICK", defaults.store_tick_rate
            ),
            inline_height=_env_int(
                "RAD_TUI_INLINE_HEIGHT", defaults.inline_height
            ),
            ctrl_c_interrupts=_env_flag(
                "RAD_TUI_CTRL_C_INTERRUPTS", defaults.ctrl_c_interrupts
            ),
            widget_memory_limit=_env_int(
                "RAD_TUI_WIDGET_MEMORY", defaults.widget_memory_limit
            ),
            write_log=os.environ.get("RAD_TUI_WRITE_LOG", ""),
            log_file=os.environ.get("RAD_TUI_LOG", ""),
            log_level=os.environ.get("RAD_TUI_LOG_LEVEL", defaults.log_level),
        )
