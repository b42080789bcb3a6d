"""
Main CLI application using Typer.

Command groups are registered here; each group is a Typer app owning its
subcommands and calling the use cases directly.
"""

from __future__ import annotations

import typer

from ..infra.logging import configure_logging
from .commands import db as db_cmd
from .commands import rundown as rundown_cmd

app = typer.Typer(help="VidPOD operator CLI")

app.add_typer(db_cmd.app, name="db", help="Database schema operations")
app.add_typer(rundown_cmd.app, name="rundown", help="Rundown inspection and maintenance")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="HTTP port"),
):
    """Start the HTTP API server."""
    from ..web.server import run_server

    run_server(host=host, port=port)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """VidPOD - rundown composition engine."""
    configure_logging(log_level)


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
