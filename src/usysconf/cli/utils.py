"""
CLI utility helpers: consoles and output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from usysconf.core.errors import ConfigError, UsysconfError
from usysconf.core.settings import UsysconfSettings, get_settings

console = Console()
err_console = Console(stderr=True)


def fail(message: str, code: str = "ERROR") -> typer.Exit:
    """Print an error line and build the exit to raise."""
    err_console.print(f"[bold red]Error[/bold red] ({code}): {escape(message)}")
    return typer.Exit(code=1)


def fail_from(error: UsysconfError) -> typer.Exit:
    return fail(error.message, code=error.category.value)


def load_settings() -> UsysconfSettings:
    """Settings for this invocation; invalid USYSCONF_* values end the command."""
    try:
        return get_settings()
    except ValidationError as e:
        raise fail_from(ConfigError(f"Invalid settings: {e}", cause=e)) from e


def output_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_table(items: list, *, title: str = "") -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    if not items:
        console.print("[dim]No items.[/dim]")
        return
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(str(v) for v in d.values()))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
