"""
CLI: ``usysconf list`` — show the registered triggers.
"""

from __future__ import annotations

import typer

from usysconf.cli.utils import output_json, print_table
from usysconf.framework.registry import HANDLERS, list_handlers


def list_triggers(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List known triggers in the order they run."""
    rows = [
        {
            "name": handler.name,
            "description": handler.description,
            "executable": handler.required_executable or "",
            "available": handler.is_available(),
        }
        for handler in list_handlers(HANDLERS)
    ]
    if json_out:
        output_json(rows)
    else:
        print_table(rows, title="Triggers")
