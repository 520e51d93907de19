"""Tests for usysconf.core.logging helpers."""

import logging

import structlog

from usysconf.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_configured,
    set_level,
)


class TestConfigure:
    def test_configured_by_session(self):
        assert is_configured()

    def test_second_call_is_noop(self):
        handlers = list(logging.getLogger().handlers)
        configure_logging(level="ERROR")
        assert logging.getLogger().handlers == handlers
        assert logging.getLogger().level == logging.INFO

    def test_set_level(self):
        set_level("debug")
        try:
            assert logging.getLogger().level == logging.DEBUG
        finally:
            set_level("INFO")

    def test_get_logger_logs(self, caplog):
        with caplog.at_level(logging.INFO):
            get_logger("usysconf.test").info("test.event", answer=42)
        assert "test.event" in caplog.text


class TestLogContext:
    def test_binds_and_unbinds(self):
        with LogContext(trigger="fonts", path="/usr/share/fonts"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["trigger"] == "fonts"
            assert bound["path"] == "/usr/share/fonts"
        assert "trigger" not in structlog.contextvars.get_contextvars()

    def test_nested_keeps_outer(self):
        with LogContext(run_trigger="all"):
            with LogContext(trigger="mime"):
                pass
            assert structlog.contextvars.get_contextvars() == {"run_trigger": "all"}

    def test_clear_context(self):
        bind_context(trigger="dconf")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
