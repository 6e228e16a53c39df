"""
CLI: ``metacat files`` — catalog file listing.
"""

from __future__ import annotations

from pathlib import Path

import typer

from metacat.cli.utils import console, make_context, output_result
from metacat.core.models import CatalogType

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_files(
    catalog: CatalogType = typer.Argument(..., help="Catalog type"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the files of one catalog type."""
    from metacat.ops.files import list_files as _list

    ctx = make_context(data_dir)
    result = _list(ctx, catalog.value)
    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return
    if not result.data:
        console.print("[dim]No items.[/dim]")
        return
    for name in result.data:
        console.print(name)
