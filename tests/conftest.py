"""
Shared pytest fixtures and configuration for usysconf tests.

This module provides:
- Logging configured once per session
- Settings pointing the run log and state file at a scratch directory
- Synthetic handlers that record every invocation
- A scratch tree of files for glob patterns to match

Usage:
    def test_something(settings, context, make_handler, conf_tree):
        handler, action = make_handler("alpha", [str(conf_tree / "*.conf")])
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from usysconf.core import environment
from usysconf.core.context import Context
from usysconf.core.logging import clear_context, configure_logging
from usysconf.core.settings import UsysconfSettings, reset_settings
from usysconf.core.status import Status
from usysconf.handlers.base import Handler

# =============================================================================
# Session setup
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _logging() -> None:
    configure_logging(level="INFO", format="console", force=True)


@pytest.fixture(autouse=True)
def _clean_state() -> Iterator[None]:
    """Drop cached settings and bound log context around every test."""
    reset_settings()
    clear_context()
    yield
    reset_settings()
    clear_context()


# =============================================================================
# Settings / context
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> UsysconfSettings:
    """Settings with the run log and state file under ``tmp_path``."""
    return UsysconfSettings(
        log_dir=tmp_path / "log",
        state_file=tmp_path / "state" / "status.json",
        require_root=False,
    )


@pytest.fixture
def settings_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the process settings at ``tmp_path`` through USYSCONF_* variables."""
    monkeypatch.setenv("USYSCONF_LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setenv("USYSCONF_STATE_FILE", str(tmp_path / "state" / "status.json"))
    monkeypatch.setenv("USYSCONF_REQUIRE_ROOT", "false")
    reset_settings()
    return tmp_path


@pytest.fixture
def host_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend to run on a booted host: no chroot, live medium or container."""
    monkeypatch.setattr(environment, "is_chrooted", lambda: False)
    monkeypatch.setattr(environment, "is_live_medium", lambda: False)
    monkeypatch.setattr(environment, "is_container", lambda: False)


@pytest.fixture
def console_output() -> StringIO:
    return StringIO()


@pytest.fixture
def quiet_console(console_output: StringIO) -> Console:
    return Console(file=console_output, highlight=False, width=120)


@pytest.fixture
def context(quiet_console: Console) -> Context:
    return Context(console=quiet_console)


# =============================================================================
# Synthetic handlers
# =============================================================================


class RecordingAction:
    """Handler action that records the paths it was given.

    ``result`` is either a fixed ``Status`` or a callable ``(ctx, path)``
    computing one.
    """

    def __init__(self, result: Status | Callable[[Context, str], Status] = Status.SUCCESS):
        self.result = result
        self.calls: list[str] = []

    def __call__(self, ctx: Context, path: str) -> Status:
        self.calls.append(path)
        if isinstance(self.result, Status):
            return self.result
        return self.result(ctx, path)


@pytest.fixture
def make_handler() -> Callable[..., tuple[Handler, RecordingAction]]:
    def _make(
        name: str,
        patterns: list[str],
        result: Status | Callable[[Context, str], Status] = Status.SUCCESS,
    ) -> tuple[Handler, RecordingAction]:
        action = RecordingAction(result)
        handler = Handler(
            name=name,
            description=f"Synthetic {name} handler",
            action=action,
            glob_patterns=tuple(patterns),
        )
        return handler, action

    return _make


@pytest.fixture
def conf_tree(tmp_path: Path) -> Path:
    """Directory holding a.conf, b.conf, c.conf and notes.txt."""
    root = tmp_path / "tree"
    root.mkdir()
    for name in ("a.conf", "b.conf", "c.conf"):
        (root / name).write_text(f"{name}\n")
    (root / "notes.txt").write_text("notes\n")
    return root
