from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownStory
from ..domain.interfaces import StoryRecord, StoryRepository
from ..infra.exceptions import InvalidArgumentError
from ..shared.types import Actor
from .rundown_add import _load_rundown

DEFAULT_BROWSE_LIMIT = 50
MAX_BROWSE_LIMIT = 200


def _story_to_dict(story: StoryRecord, attached: set[int] | None) -> dict[str, Any]:
    data = {
        "story_id": story.story_id,
        "title": story.title,
        "description": story.description,
        "questions": list(story.questions),
        "interviewees": list(story.interviewees),
        "tags": list(story.tags),
        "approved": story.approved,
        "owner_id": story.owner_id,
    }
    if attached is not None:
        data["already_attached"] = story.story_id in attached
    return data


def browse_stories(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    stories: StoryRepository,
    search: str | None = None,
    tag: str | None = None,
    limit: int = DEFAULT_BROWSE_LIMIT,
    offset: int = 0,
    rundown_id: str | None = None,
) -> dict[str, Any]:
    """
    Page through the source stories the actor may attach.

    Approved stories are visible to everyone; unapproved ones only to their
    owner. With ``rundown_id`` each story also reports whether it is already
    attached to that rundown (the actor must be able to view the rundown).

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        stories: Story repository
        search: Substring matched against title and description
        tag: Exact tag filter
        limit: Page size (1..200)
        offset: Number of stories to skip
        rundown_id: Optional rundown for the already-attached flag

    Returns:
        Dictionary with ``stories``, ``total``, ``limit`` and ``offset``

    Raises:
        InvalidArgumentError: Bad limit or offset
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not view the rundown
    """
    if limit < 1 or limit > MAX_BROWSE_LIMIT:
        raise InvalidArgumentError(f"Limit must be between 1 and {MAX_BROWSE_LIMIT}")
    if offset < 0:
        raise InvalidArgumentError("Offset must not be negative")

    attached: set[int] | None = None
    if rundown_id is not None:
        rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=False)
        attached = {
            row.source_story_id
            for row in db.query(RundownStory.source_story_id).filter(RundownStory.rundown_id == rundown.id)
        }

    search_term = (search or "").strip() or None
    tag_term = (tag or "").strip() or None
    visible = [
        s for s in stories.search_stories(search=search_term, tag=tag_term) if s.is_visible_to(actor)
    ]
    page = visible[offset : offset + limit]

    return {
        "stories": [_story_to_dict(s, attached) for s in page],
        "total": len(visible),
        "limit": limit,
        "offset": offset,
    }


__all__ = ["browse_stories"]
