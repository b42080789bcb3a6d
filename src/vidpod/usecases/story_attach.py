from __future__ import annotations

import uuid as uuid_module
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment, RundownStory
from ..domain.interfaces import StoryRecord, StoryRepository
from ..infra.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from ..shared.types import Actor
from .rundown_add import TITLE_MAX_LENGTH, _format_datetime, _load_rundown, _parse_id

_log = structlog.get_logger(__name__)


def _resolve_link(db: Session, link_id: Any) -> RundownStory:
    lid = _parse_id(link_id, "Story link")
    link = db.query(RundownStory).filter(RundownStory.id == lid).one_or_none()
    if link is None:
        raise NotFoundError(f"Story link '{link_id}' not found")
    return link


def _resolve_link_segment(
    db: Session, rundown_id: uuid_module.UUID, segment_id: Any
) -> uuid_module.UUID:
    """Return the segment id when it belongs to the rundown.

    Raises InvalidArgumentError if it does not.
    """
    try:
        sid = uuid_module.UUID(str(segment_id))
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Segment '{segment_id}' does not belong to this rundown")
    segment = (
        db.query(RundownSegment)
        .filter(RundownSegment.id == sid, RundownSegment.rundown_id == rundown_id)
        .one_or_none()
    )
    if segment is None:
        raise InvalidArgumentError(f"Segment '{segment_id}' does not belong to this rundown")
    return segment.id


def _visible_story(stories: StoryRepository, actor: Actor, story_id: int) -> StoryRecord:
    """Fetch a story the actor may see; invisible stories look missing."""
    story = stories.get_story(story_id)
    if not story.is_visible_to(actor):
        raise NotFoundError(f"Story '{story_id}' not found")
    return story


def _string_list(values: Any) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        return [values] if values.strip() else []
    return [str(v) for v in values if v is not None and str(v).strip()]


def _link_to_dict(link: RundownStory) -> dict[str, Any]:
    return {
        "id": str(link.id),
        "rundown_id": str(link.rundown_id),
        "segment_id": str(link.segment_id) if link.segment_id else None,
        "source_story_id": link.source_story_id,
        "title": link.title,
        "description": link.description,
        "questions": list(link.questions or []),
        "interviewees": list(link.interviewees or []),
        "tags": list(link.tags or []),
        "notes": link.notes,
        "attached_by": link.attached_by,
        "attached_at": _format_datetime(link.attached_at),
    }


def attach_story(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    stories: StoryRepository,
    rundown_id: str,
    source_story_id: int,
    segment_id: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Attach a snapshot of a source story to a rundown.

    Title, description, questions, interviewees and tags are copied now and
    are not refreshed when the source story changes.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        stories: Story repository
        rundown_id: Rundown UUID
        source_story_id: Id of the story in the repository
        segment_id: Optional segment of the same rundown to file the story under
        notes: Optional producer notes

    Returns:
        Dictionary with story link details

    Raises:
        NotFoundError: Rundown not found, or story missing or not visible
        AccessDeniedError: The actor may not edit the rundown
        InvalidArgumentError: Segment belongs to another rundown
        ConflictError: Story already attached to this rundown
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True, lock=True)

    if isinstance(source_story_id, bool) or not isinstance(source_story_id, int):
        raise NotFoundError(f"Story '{source_story_id}' not found")

    segment_uuid = _resolve_link_segment(db, rundown.id, segment_id) if segment_id is not None else None

    existing = (
        db.query(RundownStory)
        .filter(
            RundownStory.rundown_id == rundown.id,
            RundownStory.source_story_id == source_story_id,
        )
        .first()
    )
    if existing is not None:
        raise ConflictError(f"Story '{source_story_id}' is already attached to this rundown")

    story = _visible_story(stories, actor, source_story_id)

    link = RundownStory(
        rundown_id=rundown.id,
        segment_id=segment_uuid,
        source_story_id=story.story_id,
        title=(story.title or "Untitled story")[:TITLE_MAX_LENGTH],
        description=story.description,
        questions=_string_list(story.questions),
        interviewees=_string_list(story.interviewees),
        tags=_string_list(story.tags),
        notes=notes,
        attached_by=actor.actor_id,
    )
    db.add(link)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Story '{source_story_id}' is already attached to this rundown") from e

    result = _link_to_dict(link)
    db.commit()

    _log.info(
        "story_attached",
        rundown_id=str(rundown.id),
        link_id=result["id"],
        source_story_id=source_story_id,
        actor_id=actor.actor_id,
    )
    return result


__all__ = ["attach_story"]
