"""metacat command-line interface (typer + rich)."""
