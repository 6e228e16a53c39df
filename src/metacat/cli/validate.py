"""
CLI: ``metacat validate`` — term, vocabulary and domain validation and the unified report.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer

from metacat.cli.utils import console, fail, make_context, print_dict, print_table

app = typer.Typer(no_args_is_help=True)

DataDir = typer.Option(None, "--data-dir", "-d", help="Catalog data directory (default: METACAT_DATA_DIR)")


@app.command("terms")
def terms(
    file: str = typer.Option("term.json", "--file", "-f", help="Term file"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Validate every term of a file."""
    from metacat.ops.terms import validate_all_terms

    ctx = make_context(data_dir)
    result = validate_all_terms(ctx, file)
    if not result.success:
        fail(result)
    data = result.data
    if json_out:
        console.print_json(json.dumps(data, default=str, ensure_ascii=False))
        return

    rows = [
        {
            "termName": f["entry"].get("termName", ""),
            "columnName": f["entry"].get("columnName", ""),
            "error": f["errors"][0]["message"] if f["errors"] else "",
            "errors": len(f["errors"]),
            "fix": (f.get("suggestions") or {}).get("actionType", ""),
        }
        for f in data["failedEntries"]
    ]
    if rows:
        print_table(rows, title=f"Failed terms ({file})")
    console.print(
        f"total [bold]{data['totalCount']}[/bold]  passed [green]{data['passedCount']}[/green]"
        f"  failed [red]{data['failedCount']}[/red]"
    )
    if data["failedCount"]:
        raise typer.Exit(code=2)


def _show_catalog_failures(data: dict, *, label_field: str, title: str, json_out: bool) -> None:
    if json_out:
        console.print_json(json.dumps(data, default=str, ensure_ascii=False))
    else:
        rows = [
            {
                label_field: f["entry"].get(label_field, ""),
                "error": f["errors"][0]["message"],
                "errors": len(f["errors"]),
            }
            for f in data["failedEntries"]
        ]
        if rows:
            print_table(rows, title=title)
        console.print(
            f"total [bold]{data['totalCount']}[/bold]  passed [green]{data['passedCount']}[/green]"
            f"  failed [red]{data['failedCount']}[/red]"
        )
    if data["failedCount"]:
        raise typer.Exit(code=2)


@app.command("vocabulary")
def vocabulary(
    file: str = typer.Option("vocabulary.json", "--file", "-f", help="Vocabulary file"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Validate every word of a vocabulary file."""
    from metacat.ops.vocabulary import validate_all_vocabulary

    result = validate_all_vocabulary(make_context(data_dir), file)
    if not result.success:
        fail(result)
    _show_catalog_failures(
        result.data, label_field="standardName", title=f"Failed words ({file})", json_out=json_out
    )


@app.command("domains")
def domains(
    file: str = typer.Option("domain.json", "--file", "-f", help="Domain file"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Validate every domain of a domain file."""
    from metacat.ops.domains import validate_all_domains

    result = validate_all_domains(make_context(data_dir), file)
    if not result.success:
        fail(result)
    _show_catalog_failures(
        result.data, label_field="standardDomainName", title=f"Failed domains ({file})", json_out=json_out
    )


@app.command("report")
def report(
    term_file: str | None = typer.Option(None, "--term-file"),
    database_file: str | None = typer.Option(None, "--database-file"),
    entity_file: str | None = typer.Option(None, "--entity-file"),
    attribute_file: str | None = typer.Option(None, "--attribute-file"),
    table_file: str | None = typer.Option(None, "--table-file"),
    column_file: str | None = typer.Option(None, "--column-file"),
    limit: int = typer.Option(50, "--limit", "-n", help="Issues to show"),
    data_dir: Path | None = DataDir,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Unified term + relation validation report."""
    from metacat.ops.requests import RelationFilesRequest, ValidationReportRequest
    from metacat.orchestration.report import build_validation_report
    from metacat.orchestration.steps import InProcessStepClient

    ctx = make_context(data_dir)
    request = ValidationReportRequest(
        term_file=term_file,
        files=RelationFilesRequest(
            database_file=database_file,
            entity_file=entity_file,
            attribute_file=attribute_file,
            table_file=table_file,
            column_file=column_file,
        ),
    )
    result = asyncio.run(build_validation_report(InProcessStepClient(ctx), request))
    if not result.success:
        fail(result)
    data = result.data
    if json_out:
        console.print_json(json.dumps(data, default=str, ensure_ascii=False))
        return

    issues = data["issues"][:limit]
    if issues:
        print_table(issues, title="Issues", columns=["level", "source", "code", "label", "message"])
    print_dict(data["summary"], title="Summary")
