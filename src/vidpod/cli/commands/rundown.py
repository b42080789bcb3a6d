from __future__ import annotations

import json
from pathlib import Path

import typer

from ...adapters.renderers.text_renderer import PlainTextRenderer
from ...adapters.yaml_directory import YamlDirectory
from ...core.access import AccessEvaluator
from ...infra.exceptions import VidpodError
from ...infra.settings import settings
from ...infra.uow import session
from ...shared.types import Actor, Role
from ...usecases import rundown_add as _uc_rundown_add
from ...usecases import rundown_archive as _uc_rundown_archive
from ...usecases import rundown_export as _uc_rundown_export
from ...usecases import rundown_list as _uc_rundown_list
from ...usecases import rundown_show as _uc_rundown_show

app = typer.Typer(name="rundown", help="Rundown inspection and maintenance")


def _load_directory() -> YamlDirectory:
    if settings.directory_file:
        return YamlDirectory(Path(settings.directory_file))
    return YamlDirectory.from_data({})


def _actor(actor_id: str, role: str) -> Actor:
    try:
        return Actor(actor_id=actor_id, role=Role(role.lower()))
    except ValueError:
        valid = ", ".join(r.value for r in Role)
        typer.echo(f"Error: Invalid role '{role}'. Valid roles: {valid}", err=True)
        raise typer.Exit(2)


def _fail(e: VidpodError, json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps({"status": "error", "code": e.kind, "message": str(e)}, indent=2))
    else:
        typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


def _mmss(seconds: int | None) -> str:
    if seconds is None:
        return "-"
    return f"{seconds // 60}:{seconds % 60:02d}"


@app.command("list")
def list_rundowns(
    actor_id: str = typer.Option("operator", "--actor-id", help="Acting user id"),
    role: str = typer.Option("admin", "--role", help="Acting role: admin, teacher, student, user"),
    include_archived: bool = typer.Option(False, "--all", help="Include archived rundowns"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List rundowns visible to the acting user.

    Examples:
        vidpod rundown list
        vidpod rundown list --actor-id t-100 --role teacher --json
    """
    actor = _actor(actor_id, role)
    access = AccessEvaluator(_load_directory())
    with session() as db:
        try:
            result = _uc_rundown_list.list_rundowns(
                db, actor=actor, access=access, include_archived=include_archived
            )
        except VidpodError as e:
            _fail(e, json_output)

    if json_output:
        typer.echo(json.dumps({"status": "ok", "rundowns": result, "count": len(result)}, indent=2))
        return
    if not result:
        typer.echo("No rundowns found")
        return
    for item in result:
        typer.echo(
            f"{item['id']}  {item['title']}  [{item['status']}]  "
            f"segments={item['segment_count']} talent={item['talent_count']} "
            f"stories={item['story_count']} total={_mmss(item['total_duration'])}"
        )


@app.command("show")
def show_rundown(
    rundown_id: str = typer.Argument(..., help="Rundown UUID"),
    actor_id: str = typer.Option("operator", "--actor-id", help="Acting user id"),
    role: str = typer.Option("admin", "--role", help="Acting role"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Show a rundown with its segments, talent and stories."""
    actor = _actor(actor_id, role)
    access = AccessEvaluator(_load_directory())
    with session() as db:
        try:
            result = _uc_rundown_show.show_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
        except VidpodError as e:
            _fail(e, json_output)

    if json_output:
        typer.echo(json.dumps({"status": "ok", "rundown": result}, indent=2))
        return
    typer.echo(f"Rundown: {result['title']}")
    typer.echo(f"  ID: {result['id']}")
    typer.echo(f"  Status: {result['status']}")
    typer.echo(f"  Created by: {result['created_by']}")
    if result.get("class_id"):
        typer.echo(f"  Class: {result['class_id']} (shared: {result['share_with_class']})")
    typer.echo("  Segments:")
    for segment in result["segments"]:
        marker = " [pinned]" if segment["pinned"] else ""
        typer.echo(f"    {segment['rank']}. {segment['title']} ({_mmss(segment['duration'])}){marker}")
    for group, members in result["talent"].items():
        if members:
            typer.echo(f"  {group.title()}s: {', '.join(m['name'] for m in members)}")
    typer.echo(f"  Stories: {len(result['stories'])}")


@app.command("create")
def create_rundown(
    title: str = typer.Option(..., "--title", help="Rundown title"),
    actor_id: str = typer.Option(..., "--actor-id", help="Creator user id"),
    role: str = typer.Option("teacher", "--role", help="Creator role"),
    description: str | None = typer.Option(None, "--description", help="Description"),
    scheduled_date: str | None = typer.Option(None, "--date", help="Air date (ISO-8601)"),
    target_duration: int | None = typer.Option(None, "--target", help="Target duration in seconds"),
    class_id: str | None = typer.Option(None, "--class", help="Owning class id"),
    share: bool = typer.Option(False, "--share/--no-share", help="Share with the class"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Create a rundown with its pinned intro and outro."""
    actor = _actor(actor_id, role)
    access = AccessEvaluator(_load_directory())
    with session() as db:
        try:
            result = _uc_rundown_add.add_rundown(
                db,
                actor=actor,
                access=access,
                title=title,
                description=description,
                scheduled_date=scheduled_date,
                target_duration=target_duration,
                class_id=class_id,
                share_with_class=share,
            )
        except VidpodError as e:
            _fail(e, json_output)

    if json_output:
        typer.echo(json.dumps({"status": "ok", "rundown": result}, indent=2))
    else:
        typer.echo("Rundown created:")
        typer.echo(f"  ID: {result['id']}")
        typer.echo(f"  Title: {result['title']}")


@app.command("export")
def export_rundown(
    rundown_id: str = typer.Argument(..., help="Rundown UUID"),
    actor_id: str = typer.Option("operator", "--actor-id", help="Acting user id"),
    role: str = typer.Option("admin", "--role", help="Acting role"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    json_output: bool = typer.Option(False, "--json", help="Export the structured document as JSON"),
):
    """Export a rundown as a text sheet or JSON document."""
    actor = _actor(actor_id, role)
    access = AccessEvaluator(_load_directory())
    with session() as db:
        try:
            document = _uc_rundown_export.export_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
        except VidpodError as e:
            _fail(e, json_output)

    if json_output:
        payload = json.dumps(document, indent=2).encode("utf-8")
    else:
        payload = PlainTextRenderer().render(document)

    if output is not None:
        output.write_bytes(payload)
        typer.echo(f"Exported to {output}")
    else:
        typer.echo(payload.decode("utf-8"), nl=False)


@app.command("archive")
def archive_rundown(
    rundown_id: str = typer.Argument(..., help="Rundown UUID"),
    actor_id: str = typer.Option("operator", "--actor-id", help="Acting user id"),
    role: str = typer.Option("admin", "--role", help="Acting role"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Archive a rundown."""
    actor = _actor(actor_id, role)
    access = AccessEvaluator(_load_directory())
    with session() as db:
        try:
            result = _uc_rundown_archive.archive_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
        except VidpodError as e:
            _fail(e, json_output)

    if json_output:
        typer.echo(json.dumps({"status": "ok", "rundown": result}, indent=2))
    else:
        typer.echo(f"Rundown archived: {result['id']}")


@app.command("purge")
def purge_rundown(
    rundown_id: str = typer.Argument(..., help="Rundown UUID"),
    actor_id: str = typer.Option("operator", "--actor-id", help="Acting user id"),
    role: str = typer.Option("admin", "--role", help="Acting role (must be admin)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm deletion (non-interactive)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Permanently delete a rundown and everything in it.

    Requires --yes to confirm deletion.
    """
    if not yes:
        if json_output:
            typer.echo(
                json.dumps(
                    {"status": "error", "code": "confirmation_required", "message": "Purge requires --yes confirmation"},
                    indent=2,
                )
            )
        else:
            typer.echo("Purge requires --yes confirmation", err=True)
        raise typer.Exit(1)
    actor = _actor(actor_id, role)
    with session() as db:
        try:
            result = _uc_rundown_archive.purge_rundown(db, actor=actor, rundown_id=rundown_id)
        except VidpodError as e:
            _fail(e, json_output)

    if json_output:
        typer.echo(json.dumps({"status": "ok", "deleted": result}, indent=2))
    else:
        typer.echo(
            f"Rundown purged: {result['id']} "
            f"({result['segments']} segments, {result['talent']} talent, {result['stories']} stories)"
        )
