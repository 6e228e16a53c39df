"""
CLI utility helpers — output formatting and context construction.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from metacat.core.logging import configure_logging
from metacat.core.settings import MetacatSettings
from metacat.core.storage import CatalogStore
from metacat.ops.context import OperationContext
from metacat.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)


# ── Context helper ───────────────────────────────────────────────────────


def make_context(
    data_dir: Path | None = None,
    *,
    dry_run: bool = False,
) -> OperationContext:
    """Create an ``OperationContext`` over the configured (or given) data directory."""
    settings = MetacatSettings() if data_dir is None else MetacatSettings(data_dir=data_dir)
    configure_logging(level="WARNING" if not settings.debug else "DEBUG", json_format=settings.log_json)
    store = CatalogStore.from_settings(settings)
    return OperationContext(store=store, caller="cli", dry_run=dry_run)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def fail(result: OperationResult[Any]) -> None:
    """Print the error of a failed result and exit 1."""
    err = result.error
    msg = err.message if err else "Unknown error"
    code = err.code if err else "ERROR"
    err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
    data = err.details.get("data") if err else None
    if isinstance(data, dict) and data.get("failedStep"):
        err_console.print(f"  [dim]failed step:[/dim] {data['failedStep']}")
    raise typer.Exit(code=1)


def output_result(
    result: OperationResult[Any],
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal."""
    if not result.success:
        fail(result)

    data = result.data

    if as_json:
        payload = _to_dict(data) if not isinstance(data, list | tuple) else [_to_dict(d) for d in data]
        console.print_json(json.dumps(payload, default=str, ensure_ascii=False))
        return

    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        print_table(data, title=title)
    else:
        print_dict(_to_dict(data), title=title)
    if result.message:
        console.print(f"[green]{result.message}[/green]")
    for warning in result.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")


def print_table(items: list, *, title: str = "", columns: list[str] | None = None) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    first = _to_dict(items[0])
    names = columns or list(first)
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in names:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(str(d.get(c, "")) for c in names))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs; nested values are summarised."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        if isinstance(v, list):
            v = f"[{len(v)} items]"
        elif isinstance(v, dict):
            v = ", ".join(f"{ik}={iv}" for ik, iv in v.items() if not isinstance(iv, list | dict))
        console.print(f"  [cyan]{k}[/cyan]: {v}")
