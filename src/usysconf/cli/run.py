"""
CLI: ``usysconf run`` — run all triggers, or one trigger by name.
"""

from __future__ import annotations

import os

import typer

from usysconf.cli.utils import console, err_console, fail_from, load_settings, output_json
from usysconf.core.context import Context
from usysconf.core.errors import PermissionDeniedError, UnknownTriggerError, UsysconfError
from usysconf.core.logging import get_logger
from usysconf.core.settings import UsysconfSettings
from usysconf.framework.dispatcher import RunReport, TriggerDispatcher
from usysconf.framework.registry import HANDLERS

log = get_logger(__name__)


def _require_root(settings: UsysconfSettings) -> None:
    if settings.require_root and os.geteuid() != 0:
        raise PermissionDeniedError()


def _print_summary(report: RunReport) -> None:
    if report.failures:
        err_console.print(f"[red]{len(report.failures)} path(s) failed:[/red]")
        for trigger, path in report.failures:
            err_console.print(f"  [red]✗[/red] {trigger}: {path}")
    if not report.state_written:
        err_console.print("[red]State was not persisted.[/red]")
    console.print(
        f"[dim]{len(report.handlers_run)} trigger(s) run, "
        f"{report.invocations} invocation(s), {report.recorded} path(s) recorded[/dim]"
    )


def run(
    name: str | None = typer.Argument(None, help="Trigger to run (all triggers when omitted)"),
    force: bool = typer.Option(False, "--force", "-f", help="Ignore recorded state and run everything"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would run without changing anything"),
    chroot: bool = typer.Option(False, "--chroot", "-c", help="Behave as if running inside a chroot"),
    live: bool = typer.Option(False, "--live", "-l", help="Behave as if running on a live medium"),
    skip: list[str] | None = typer.Option(None, "--skip", "-s", help="Trigger to veto for this run (repeatable)"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run system configuration triggers for changed paths."""
    settings = load_settings()
    try:
        _require_root(settings)
    except PermissionDeniedError as e:
        raise fail_from(e) from e

    context = Context.from_environment(
        force_chroot=chroot,
        force_live=live,
        force=force,
        dry_run=dry_run,
        console=console,
    )
    for key in skip or []:
        context.push_skip(key)

    dispatcher = TriggerDispatcher(context, settings=settings, handlers=HANDLERS)
    try:
        report = dispatcher.run(name)
    except UnknownTriggerError as e:
        log.error("dispatch.unknown_trigger", trigger=e.trigger_name)
        raise fail_from(e) from e
    except UsysconfError as e:
        log.error("dispatch.aborted", **e.to_dict())
        raise fail_from(e) from e

    if json_out:
        output_json(report.to_dict())
    else:
        _print_summary(report)

    if not report.success:
        raise typer.Exit(code=1)
