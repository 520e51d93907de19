"""
Root Typer application for the usysconf CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from usysconf import __version__
from usysconf.cli.utils import load_settings
from usysconf.core.logging import configure_logging, set_level

app = Typer(
    name="usysconf",
    help="usysconf — run system configuration triggers after package operations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"usysconf {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Log at DEBUG level."),
) -> None:
    """usysconf CLI — run, list and inspect system configuration triggers."""
    load_settings()
    configure_logging()
    if debug:
        set_level("DEBUG")


# ── Command registration ─────────────────────────────────────────────────

from usysconf.cli.run import run  # noqa: E402
from usysconf.cli.state import show_state  # noqa: E402
from usysconf.cli.triggers import list_triggers  # noqa: E402

app.command("run")(run)
app.command("list")(list_triggers)
app.command("state")(show_state)
