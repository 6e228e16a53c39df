"""
CLI: ``metacat sync`` — synchronizers and the alignment pipeline.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer

from metacat.cli.utils import console, fail, make_context, output_result, print_dict

app = typer.Typer(no_args_is_help=True)

DataDir = typer.Option(None, "--data-dir", "-d", help="Catalog data directory (default: METACAT_DATA_DIR)")


@app.command("align")
def align(
    preview: bool = typer.Option(False, "--preview", help="Compute changes without writing"),
    vocabulary: str = typer.Option("vocabulary.json", "--vocabulary"),
    domain: str = typer.Option("domain.json", "--domain"),
    term: str = typer.Option("term.json", "--term"),
    column: str = typer.Option("column.json", "--column"),
    database_file: str | None = typer.Option(None, "--database-file"),
    entity_file: str | None = typer.Option(None, "--entity-file"),
    attribute_file: str | None = typer.Option(None, "--attribute-file"),
    table_file: str | None = typer.Option(None, "--table-file"),
    column_file: str | None = typer.Option(None, "--column-file"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run vocabulary → term → relation → column sync, then the validation report."""
    from metacat.ops.requests import AlignmentRequest, RelationFilesRequest
    from metacat.orchestration.alignment import run_alignment
    from metacat.orchestration.steps import InProcessStepClient

    ctx = make_context(data_dir)
    request = AlignmentRequest(
        apply=not preview,
        vocabulary_filename=vocabulary,
        domain_filename=domain,
        term_filename=term,
        column_filename=column,
        files=RelationFilesRequest(
            database_file=database_file,
            entity_file=entity_file,
            attribute_file=attribute_file,
            table_file=table_file,
            column_file=column_file,
        ),
    )
    result = asyncio.run(run_alignment(InProcessStepClient(ctx), request))
    if not result.success:
        fail(result)
    if json_out:
        console.print_json(json.dumps(result.data, default=str, ensure_ascii=False))
        return
    print_dict(result.data["summary"], title=f"Alignment ({result.data['mode']})")
    if result.message:
        console.print(f"[green]{result.message}[/green]")


@app.command("terms")
def terms(
    file: str = typer.Option("term.json", "--file", "-f", help="Term file"),
    preview: bool = typer.Option(False, "--preview", help="Compute changes without writing"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Recompute term mapping flags."""
    from metacat.ops.requests import SyncTermsRequest
    from metacat.ops.terms import sync_terms

    ctx = make_context(data_dir)
    result = sync_terms(ctx, SyncTermsRequest(filename=file, apply=not preview))
    output_result(result, as_json=json_out, title="Term sync")


@app.command("columns")
def columns(
    column_file: str | None = typer.Option(None, "--column-file"),
    term_file: str | None = typer.Option(None, "--term-file"),
    domain_file: str | None = typer.Option(None, "--domain-file"),
    preview: bool = typer.Option(False, "--preview", help="Compute changes without writing"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Derive column fields from terms and domains."""
    from metacat.ops.columns import sync_column_terms
    from metacat.ops.requests import SyncColumnsRequest

    ctx = make_context(data_dir)
    request = SyncColumnsRequest(
        column_filename=column_file,
        term_filename=term_file,
        domain_filename=domain_file,
        apply=not preview,
    )
    output_result(sync_column_terms(ctx, request), as_json=json_out, title="Column sync")
