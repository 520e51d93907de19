"""
Run context: environment flags, skip set and task progress output.

A ``Context`` is created once per run and handed to the dispatcher, which
passes it to every handler action.  Environment flags are fixed when the
context is built; the skip set is the only part that changes during a run.

Manifesto:
    Environment detection happens once and is threaded through explicitly,
    never re-read from ambient global state, so the dispatcher can be
    exercised with synthetic contexts.

Examples:
    >>> ctx = Context(ContextFlag.CHROOTED)
    >>> ctx.has_flag(ContextFlag.CHROOTED)
    True
    >>> ctx.push_skip("systemd-reload")
    >>> ctx.should_skip("systemd-reload")
    True

Tags:
    context, environment, chroot, container, usysconf

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Flag, auto

from rich.console import Console
from rich.markup import escape

from usysconf.core import environment
from usysconf.core.errors import EnvironmentDetectionError
from usysconf.core.logging import get_logger
from usysconf.core.status import Status

log = get_logger(__name__)


class ContextFlag(Flag):
    """Environment the run executes in."""

    CHROOTED = auto()
    LIVE_MEDIUM = auto()
    CONTAINER = auto()


SANDBOXED = ContextFlag.CHROOTED | ContextFlag.LIVE_MEDIUM | ContextFlag.CONTAINER

_STATUS_STYLE = {
    "success": ("[bold green]✓[/bold green]", "green"),
    "failed": ("[bold red]✗[/bold red]", "red"),
    "skipped": ("[bold yellow]⚡[/bold yellow]", "yellow"),
    "unknown": ("[dim]?[/dim]", "dim"),
}


class Context:
    """
    Process-wide configuration for one run.

    Args:
        flags: Environment flags, fixed for the context's lifetime
        force: Treat every matched path as stale
        dry_run: Handlers must not spawn commands; state is not persisted
        console: Where task progress lines go (stdout by default)
    """

    def __init__(
        self,
        flags: ContextFlag = ContextFlag(0),
        *,
        force: bool = False,
        dry_run: bool = False,
        console: Console | None = None,
    ):
        self._flags = flags
        self._skip: dict[str, bool] = {}
        self.force = force
        self.dry_run = dry_run
        self.console = console or Console(highlight=False)
        self._task: str | None = None

    @classmethod
    def from_environment(
        cls,
        *,
        force_chroot: bool = False,
        force_live: bool = False,
        force: bool = False,
        dry_run: bool = False,
        console: Console | None = None,
    ) -> Context:
        """Detect chroot / live medium / container once and build a context."""
        flags = ContextFlag(0)
        if force_chroot or _probe(environment.is_chrooted):
            flags |= ContextFlag.CHROOTED
        if force_live or _probe(environment.is_live_medium):
            flags |= ContextFlag.LIVE_MEDIUM
        if _probe(environment.is_container):
            flags |= ContextFlag.CONTAINER

        log.debug(
            "context.created",
            chrooted=ContextFlag.CHROOTED in flags,
            live_medium=ContextFlag.LIVE_MEDIUM in flags,
            container=ContextFlag.CONTAINER in flags,
        )
        return cls(flags, force=force, dry_run=dry_run, console=console)

    @property
    def flags(self) -> ContextFlag:
        return self._flags

    def has_flag(self, flag: ContextFlag) -> bool:
        """True when every bit of ``flag`` is set."""
        return (self._flags & flag) == flag

    def is_sandboxed(self, flags: ContextFlag = SANDBOXED) -> bool:
        """True when any of ``flags`` is set."""
        return bool(self._flags & flags)

    # ── Skip set ─────────────────────────────────────────────────

    def push_skip(self, key: str) -> None:
        """Mark ``key`` to be skipped for the rest of the run."""
        self._skip[key] = True

    def should_skip(self, key: str) -> bool:
        return key in self._skip

    @property
    def skipped(self) -> frozenset[str]:
        return frozenset(self._skip)

    # ── Task progress ────────────────────────────────────────────

    def emit_task_start(self, description: str) -> None:
        """Announce an externally visible action on the operator console."""
        self._task = description
        prefix = "[dim](dry-run)[/dim] " if self.dry_run else ""
        self.console.print(f"  [cyan]•[/cyan] {prefix}{escape(description)}")
        log.info("task.started", task=description)

    def emit_task_finish(self, status: Status) -> None:
        """Report the outcome of the task started last."""
        outcome = status.outcome
        glyph, style = _STATUS_STYLE[outcome]
        task = self._task or ""
        self.console.print(f"  {glyph} [{style}]{escape(task)}[/{style}]")
        log.info("task.finished", task=task, outcome=outcome)
        self._task = None


def _probe(check) -> bool:
    try:
        return check()
    except EnvironmentDetectionError as e:
        name = getattr(check, "__name__", repr(check))
        log.warning("context.detection_failed", check=name, **e.to_dict())
        return False
