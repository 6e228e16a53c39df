"""
Root Typer application for the metacat CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="metacat",
    help="metacat — vocabulary, domain, term and design catalog manager.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from metacat import __version__

        typer.echo(f"metacat {__version__}")
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
) -> None:
    """metacat CLI — sync, validate and import catalogs."""


# ── Sub-command registration ─────────────────────────────────────────────

from metacat.cli.files import app as files_app  # noqa: E402
from metacat.cli.imports import app as import_app  # noqa: E402
from metacat.cli.serve import app as serve_app  # noqa: E402
from metacat.cli.sync import app as sync_app  # noqa: E402
from metacat.cli.validate import app as validate_app  # noqa: E402

app.add_typer(serve_app, name="serve", help="Start the API server.")
app.add_typer(sync_app, name="sync", help="Synchronizers and the alignment pipeline.")
app.add_typer(validate_app, name="validate", help="Term, vocabulary and domain validation and the unified report.")
app.add_typer(files_app, name="files", help="Catalog file management.")
app.add_typer(import_app, name="import", help="Bulk imports.")
