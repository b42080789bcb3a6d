from __future__ import annotations

import typer

from ...infra import db as db_module

app = typer.Typer(name="db", help="Database schema operations")


@app.command("init")
def init(
    echo: bool = typer.Option(False, "--echo", help="Print the target database URL"),
):
    """Create all tables on the configured database.

    For managed deployments prefer `alembic upgrade head`.
    """
    db_module.init_db()
    if echo:
        typer.echo(f"Database: {db_module.engine.url.render_as_string(hide_password=True)}")
    typer.echo("Schema created")
