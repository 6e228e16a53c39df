"""
CLI: ``metacat import`` — bulk imports.
"""

from __future__ import annotations

from pathlib import Path

import typer

from metacat.cli.utils import err_console, make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command("columns")
def columns(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, help="Column definition .xlsx"),
    file: str | None = typer.Option(None, "--file", "-f", help="Target column file"),
    replace: bool = typer.Option(False, "--replace", help="Replace the file's entries instead of merging"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Import a column definition workbook (컬럼 정의서)."""
    from metacat.ops.columns import import_column_workbook

    if workbook.suffix.lower() != ".xlsx":
        err_console.print("[bold red]Error[/bold red]: xlsx 파일만 업로드할 수 있습니다.")
        raise typer.Exit(code=1)

    ctx = make_context(data_dir)
    result = import_column_workbook(ctx, workbook.read_bytes(), filename=file, replace_entries=replace)
    output_result(result, as_json=json_out, title="Column import")
