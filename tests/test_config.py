"""Tests for rad.tui.config and rad.tui.log."""

from __future__ import annotations

import logging

import pytest

from rad.tui import log
from rad.tui.config import Config


class TestConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("RAD_TUI_RENDER_TICK", "RAD_TUI_INLINE_HEIGHT", "RAD_TUI_LOG"):
            monkeypatch.delenv(name, raising=False)
        config = Config.from_env()
        assert config.render_tick_rate == 0.25
        assert config.inline_height == 20
        assert config.log_file == ""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RAD_TUI_RENDER_TICK", "0.1")
        monkeypatch.setenv("RAD_TUI_STORE_TICK", "2")
        monkeypatch.setenv("RAD_TUI_INLINE_HEIGHT", "8")
        monkeypatch.setenv("RAD_TUI_CTRL_C_INTERRUPTS", "off")
        monkeypatch.setenv("RAD_TUI_LOG", "/tmp/rad-tui.log")
        monkeypatch.setenv("RAD_TUI_LOG_LEVEL", "debug")
        config = Config.from_env()
        assert config.render_tick_rate == 0.1
        assert config.store_tick_rate == 2.0
        assert config.inline_height == 8
        assert config.ctrl_c_interrupts is False
        assert config.log_file == "/tmp/rad-tui.log"
        assert config.log_level == "debug"

    def test_invalid_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RAD_TUI_RENDER_TICK", "fast")
        monkeypatch.setenv("RAD_TUI_WIDGET_MEMORY", "lots")
        config = Config.from_env()
        assert config.render_tick_rate == 0.25
        assert config.widget_memory_limit == 4096


class TestLog:
    def test_enable_writes_to_file(self, tmp_path) -> None:
        logger = logging.getLogger(log.LOGGER_NAME)
        level = logger.level
        path = tmp_path / "tui.log"
        try:
            log.enable(str(path), "debug")
            logging.getLogger("rad.tui.frontend").debug("hello from the loop")
        finally:
            log.disable()
            logger.setLevel(level)

        assert "hello from the loop" in path.read_text()

    def test_disable_twice_is_harmless(self) -> None:
        log.disable()
        log.disable()
