"""
CLI: ``usysconf state`` — inspect the persisted fingerprint set.
"""

from __future__ import annotations

import typer

from usysconf.cli.utils import console, fail_from, load_settings, output_json, print_table
from usysconf.core.errors import StateLoadError
from usysconf.core.state import StateTracker


def show_state(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the paths recorded by the last successful run."""
    settings = load_settings()
    tracker = StateTracker(settings.state_file)
    try:
        tracker.load()
    except StateLoadError as e:
        if isinstance(e.cause, FileNotFoundError):
            console.print("[dim]No state recorded.[/dim]")
            return
        raise fail_from(e) from e

    entries = tracker.entries()
    if json_out:
        output_json({"state_file": str(settings.state_file), "entries": entries})
        return
    print_table(
        [{"path": path, "fingerprint": fingerprint} for path, fingerprint in entries.items()],
        title=f"State ({settings.state_file})",
    )
