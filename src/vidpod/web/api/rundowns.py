"""
REST API endpoints for rundowns.

Every route authenticates the bearer token through the identity provider and
delegates to one use case. Use-case errors are translated to HTTP statuses by
the exception handlers registered in ``vidpod.web.server``.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...core.access import AccessEvaluator
from ...domain.interfaces import StoryRepository
from ...infra.exceptions import UnauthenticatedError
from ...infra.uow import get_db
from ...shared.types import Actor
from ...usecases import (
    rundown_add,
    rundown_archive,
    rundown_export,
    rundown_list,
    rundown_show,
    rundown_update,
    segment_add,
    segment_delete,
    segment_duplicate,
    segment_list,
    segment_reorder,
    segment_update,
    story_attach,
    story_browse,
    story_list,
    story_remove,
    story_update,
    talent_add,
    talent_delete,
    talent_list,
    talent_reorder,
    talent_stats,
    talent_update,
)

router = APIRouter(prefix="/api/rundowns", tags=["rundowns"])

_bearer = HTTPBearer(auto_error=False)


def current_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Actor:
    """Resolve the bearer token to an actor."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Missing bearer token")
    return request.app.state.identity.authenticate(credentials.credentials)


def get_access(request: Request) -> AccessEvaluator:
    return request.app.state.access


def get_stories(request: Request) -> StoryRepository:
    return request.app.state.stories


# ============================================================================
# Pydantic Models for Request/Response
# ============================================================================


class RundownCreate(BaseModel):
    """Request model for creating a rundown."""
    title: str = Field(..., description="Rundown title")
    description: str | None = Field(None, description="Free-text description")
    scheduled_date: str | None = Field(None, description="Air date (ISO-8601)")
    target_duration: int | None = Field(None, ge=0, description="Target duration in seconds")
    class_id: str | None = Field(None, description="Owning class")
    share_with_class: bool = Field(False, description="Readable by students enrolled in the class")


class RundownUpdate(BaseModel):
    """Request model for updating a rundown."""
    title: str | None = Field(None, description="New title")
    description: str | None = Field(None, description="New description")
    scheduled_date: str | None = Field(None, description="New air date (ISO-8601)")
    target_duration: int | None = Field(None, ge=0, description="New target duration in seconds")
    class_id: str | None = Field(None, description="New owning class")
    share_with_class: bool | None = Field(None, description="New sharing flag")
    status: str | None = Field(None, description="draft, in_progress or archived")
    clear_description: bool = Field(False, description="Clear description")
    clear_scheduled_date: bool = Field(False, description="Clear air date")
    clear_target_duration: bool = Field(False, description="Clear target duration")
    clear_class: bool = Field(False, description="Clear class assignment")


class SegmentCreate(BaseModel):
    """Request model for inserting a segment."""
    title: str = Field(..., description="Segment title")
    duration: int | None = Field(None, ge=0, description="Duration in seconds (default 60)")
    type: str | None = Field(None, description="Type tag (default 'segment')")
    status: str | None = Field(None, description="Production status (default 'Draft')")
    content: dict[str, Any] | None = Field(None, description="Structured content payload")
    insert_after: str | None = Field(None, description="Anchor segment id; omit to insert before the outro")


class SegmentUpdate(BaseModel):
    """Request model for updating a segment."""
    title: str | None = Field(None, description="New title")
    duration: int | None = Field(None, ge=0, description="New duration in seconds")
    type: str | None = Field(None, description="New type tag")
    status: str | None = Field(None, description="New production status")
    content: dict[str, Any] | None = Field(None, description="Replacement content payload")
    expanded: bool | None = Field(None, description="UI expansion hint")


class SegmentOrder(BaseModel):
    """Request model for reordering segments."""
    ordered_ids: list[str] = Field(..., description="Every segment id of the rundown in the new order")


class TalentCreate(BaseModel):
    """Request model for adding talent."""
    name: str = Field(..., description="Display name, unique per rundown")
    role: str = Field(..., description="host or guest")
    bio: str | None = Field(None, description="Short biography")
    notes: str | None = Field(None, description="Producer notes")


class TalentUpdate(BaseModel):
    """Request model for updating talent."""
    name: str | None = Field(None, description="New name")
    role: str | None = Field(None, description="New role group")
    rank: int | None = Field(None, description="New position within the role group")
    bio: str | None = Field(None, description="New biography")
    notes: str | None = Field(None, description="New notes")


class TalentOrder(BaseModel):
    """Request model for reordering one role group."""
    role: str = Field(..., description="host or guest")
    ordered_ids: list[str] = Field(..., description="Every talent id of the group in the new order")


class StoryAttach(BaseModel):
    """Request model for attaching a story."""
    story_id: int = Field(..., description="Source story id")
    segment_id: str | None = Field(None, description="Segment of this rundown to file the story under")
    notes: str | None = Field(None, description="Producer notes")


class StoryLinkUpdate(BaseModel):
    """Request model for updating a story link."""
    segment_id: str | None = Field(None, description="New segment of this rundown")
    clear_segment: bool = Field(False, description="Unassign from its segment")
    notes: str | None = Field(None, description="New notes")
    title: str | None = Field(None, description="New snapshot title")
    description: str | None = Field(None, description="New snapshot description")
    questions: list[str] | None = Field(None, description="New snapshot questions")


# ============================================================================
# Rundown Endpoints
# ============================================================================


@router.get("")
async def list_rundowns(
    include_archived: bool = Query(False, description="Include archived rundowns"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """List the rundowns visible to the caller."""
    result = rundown_list.list_rundowns(db, actor=actor, access=access, include_archived=include_archived)
    return {"status": "ok", "rundowns": result, "count": len(result)}


@router.post("", status_code=201)
async def create_rundown(
    body: RundownCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Create a rundown with its pinned intro and outro."""
    result = rundown_add.add_rundown(
        db,
        actor=actor,
        access=access,
        title=body.title,
        description=body.description,
        scheduled_date=body.scheduled_date,
        target_duration=body.target_duration,
        class_id=body.class_id,
        share_with_class=body.share_with_class,
    )
    return {"status": "ok", "rundown": result}


@router.get("/stories/browse")
async def browse_stories(
    search: str | None = Query(None, description="Match title or description"),
    tag: str | None = Query(None, description="Exact tag"),
    limit: int = Query(story_browse.DEFAULT_BROWSE_LIMIT, description="Page size"),
    offset: int = Query(0, description="Stories to skip"),
    rundown_id: str | None = Query(None, description="Flag stories already attached to this rundown"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
    stories: StoryRepository = Depends(get_stories),
) -> dict[str, Any]:
    """Browse source stories the caller may attach."""
    result = story_browse.browse_stories(
        db,
        actor=actor,
        access=access,
        stories=stories,
        search=search,
        tag=tag,
        limit=limit,
        offset=offset,
        rundown_id=rundown_id,
    )
    return {"status": "ok", **result}


@router.get("/{rundown_id}")
async def get_rundown(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Get a rundown with segments, talent, stories and permissions."""
    result = rundown_show.show_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "rundown": result}


@router.patch("/{rundown_id}")
async def update_rundown(
    rundown_id: str,
    body: RundownUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Update a rundown."""
    result = rundown_update.update_rundown(
        db,
        actor=actor,
        access=access,
        rundown_id=rundown_id,
        title=body.title,
        description=body.description,
        scheduled_date=body.scheduled_date,
        target_duration=body.target_duration,
        class_id=body.class_id,
        share_with_class=body.share_with_class,
        status=body.status,
        clear_description=body.clear_description,
        clear_scheduled_date=body.clear_scheduled_date,
        clear_target_duration=body.clear_target_duration,
        clear_class=body.clear_class,
    )
    return {"status": "ok", "rundown": result}


@router.delete("/{rundown_id}")
async def archive_rundown(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Archive a rundown (soft delete)."""
    result = rundown_archive.archive_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "rundown": result}


@router.delete("/{rundown_id}/purge")
async def purge_rundown(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
) -> dict[str, Any]:
    """Permanently delete a rundown (admins only)."""
    result = rundown_archive.purge_rundown(db, actor=actor, rundown_id=rundown_id)
    return {"status": "ok", "deleted": result}


@router.get("/{rundown_id}/export")
async def export_rundown(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Export the structured rundown document."""
    result = rundown_export.export_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "document": result}


@router.get("/{rundown_id}/export.txt")
async def export_rundown_text(
    rundown_id: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> Response:
    """Export the rundown rendered by the configured document renderer."""
    document = rundown_export.export_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
    renderer = request.app.state.renderer
    filename = f"rundown-{rundown_id}.{renderer.extension}"
    return Response(
        content=renderer.render(document),
        media_type=renderer.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================================
# Segment Endpoints
# ============================================================================


@router.get("/{rundown_id}/segments")
async def list_segments(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """List segments in rank order."""
    result = segment_list.list_segments(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "segments": result, "count": len(result)}


@router.post("/{rundown_id}/segments", status_code=201)
async def create_segment(
    rundown_id: str,
    body: SegmentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Insert a segment."""
    result = segment_add.add_segment(
        db,
        actor=actor,
        access=access,
        rundown_id=rundown_id,
        title=body.title,
        duration=body.duration,
        segment_type=body.type,
        content=body.content,
        status=body.status,
        insert_after=body.insert_after,
    )
    return {"status": "ok", "segment": result}


@router.put("/{rundown_id}/segments/order")
async def reorder_segments(
    rundown_id: str,
    body: SegmentOrder,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Apply a full segment ordering."""
    result = segment_reorder.reorder_segments(
        db, actor=actor, access=access, rundown_id=rundown_id, ordered_ids=body.ordered_ids
    )
    return {"status": "ok", "segments": result}


@router.patch("/{rundown_id}/segments/{segment_id}")
async def update_segment(
    rundown_id: str,
    segment_id: str,
    body: SegmentUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Update a segment."""
    result = segment_update.update_segment(
        db,
        actor=actor,
        access=access,
        segment_id=segment_id,
        rundown_id=rundown_id,
        title=body.title,
        duration=body.duration,
        segment_type=body.type,
        status=body.status,
        content=body.content,
        expanded=body.expanded,
    )
    return {"status": "ok", "segment": result}


@router.post("/{rundown_id}/segments/{segment_id}/duplicate", status_code=201)
async def duplicate_segment(
    rundown_id: str,
    segment_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Duplicate a segment directly after itself."""
    result = segment_duplicate.duplicate_segment(
        db, actor=actor, access=access, segment_id=segment_id, rundown_id=rundown_id
    )
    return {"status": "ok", "segment": result}


@router.delete("/{rundown_id}/segments/{segment_id}")
async def delete_segment(
    rundown_id: str,
    segment_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Delete an unpinned segment."""
    result = segment_delete.delete_segment(
        db, actor=actor, access=access, segment_id=segment_id, rundown_id=rundown_id
    )
    return {"status": "ok", "deleted": result}


# ============================================================================
# Talent Endpoints
# ============================================================================


@router.get("/{rundown_id}/talent")
async def list_talent(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """List talent grouped by role."""
    result = talent_list.list_talent(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "talent": result}


@router.get("/{rundown_id}/talent/stats")
async def get_talent_stats(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Roster counts and remaining slots."""
    result = talent_stats(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "stats": result}


@router.post("/{rundown_id}/talent", status_code=201)
async def create_talent(
    rundown_id: str,
    body: TalentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Add a host or guest."""
    result = talent_add.add_talent(
        db,
        actor=actor,
        access=access,
        rundown_id=rundown_id,
        name=body.name,
        role=body.role,
        bio=body.bio,
        notes=body.notes,
    )
    return {"status": "ok", "talent": result}


@router.put("/{rundown_id}/talent/order")
async def reorder_talent(
    rundown_id: str,
    body: TalentOrder,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Apply a full ordering to one role group."""
    result = talent_reorder.reorder_talent(
        db, actor=actor, access=access, rundown_id=rundown_id, role=body.role, ordered_ids=body.ordered_ids
    )
    return {"status": "ok", "talent": result}


@router.patch("/{rundown_id}/talent/{talent_id}")
async def update_talent(
    rundown_id: str,
    talent_id: str,
    body: TalentUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Update a talent entry."""
    result = talent_update.update_talent(
        db,
        actor=actor,
        access=access,
        talent_id=talent_id,
        rundown_id=rundown_id,
        name=body.name,
        role=body.role,
        rank=body.rank,
        bio=body.bio,
        notes=body.notes,
    )
    return {"status": "ok", "talent": result}


@router.delete("/{rundown_id}/talent/{talent_id}")
async def delete_talent(
    rundown_id: str,
    talent_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Remove a talent entry."""
    result = talent_delete.delete_talent(
        db, actor=actor, access=access, talent_id=talent_id, rundown_id=rundown_id
    )
    return {"status": "ok", "deleted": result}


# ============================================================================
# Story Link Endpoints
# ============================================================================


@router.get("/{rundown_id}/stories")
async def list_story_links(
    rundown_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """List stories attached to the rundown."""
    result = story_list.list_story_links(db, actor=actor, access=access, rundown_id=rundown_id)
    return {"status": "ok", "stories": result, "count": len(result)}


@router.post("/{rundown_id}/stories", status_code=201)
async def attach_story(
    rundown_id: str,
    body: StoryAttach,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
    stories: StoryRepository = Depends(get_stories),
) -> dict[str, Any]:
    """Attach a snapshot of a source story."""
    result = story_attach.attach_story(
        db,
        actor=actor,
        access=access,
        stories=stories,
        rundown_id=rundown_id,
        source_story_id=body.story_id,
        segment_id=body.segment_id,
        notes=body.notes,
    )
    return {"status": "ok", "story": result}


@router.patch("/{rundown_id}/stories/{link_id}")
async def update_story_link(
    rundown_id: str,
    link_id: str,
    body: StoryLinkUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Update a story link."""
    result = story_update.update_story_link(
        db,
        actor=actor,
        access=access,
        link_id=link_id,
        rundown_id=rundown_id,
        segment_id=body.segment_id,
        clear_segment=body.clear_segment,
        notes=body.notes,
        title=body.title,
        description=body.description,
        questions=body.questions,
    )
    return {"status": "ok", "story": result}


@router.delete("/{rundown_id}/stories/{link_id}")
async def remove_story_link(
    rundown_id: str,
    link_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
    access: AccessEvaluator = Depends(get_access),
) -> dict[str, Any]:
    """Detach a story from the rundown."""
    result = story_remove.remove_story_link(
        db, actor=actor, access=access, link_id=link_id, rundown_id=rundown_id
    )
    return {"status": "ok", "deleted": result}
