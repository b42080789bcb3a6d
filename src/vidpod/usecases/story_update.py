from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..infra.exceptions import InvalidArgumentError
from ..shared.types import Actor
from .rundown_add import _check_parent, _load_rundown, _validate_title
from .story_attach import _link_to_dict, _resolve_link, _resolve_link_segment, _string_list

_log = structlog.get_logger(__name__)


def update_story_link(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    link_id: str,
    rundown_id: str | None = None,
    segment_id: str | None = None,
    clear_segment: bool = False,
    notes: str | None = None,
    title: str | None = None,
    description: str | None = None,
    questions: list[str] | None = None,
) -> dict[str, Any]:
    """
    Patch a story link: move it to another segment of the same rundown, unassign
    it, or edit its snapshot fields and notes.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        link_id: Story link UUID
        rundown_id: Optional rundown the link must belong to
        segment_id: New segment, which must belong to the link's rundown
        clear_segment: Detach the link from its segment
        notes: New notes
        title: New snapshot title
        description: New snapshot description
        questions: New snapshot question list

    Returns:
        Dictionary with updated story link details

    Raises:
        NotFoundError: Story link not found
        AccessDeniedError: The actor may not edit the owning rundown
        InvalidArgumentError: Segment outside the rundown, or both segment and clear given
    """
    link = _resolve_link(db, link_id)
    _check_parent(link.rundown_id, rundown_id, "Story link", link_id)
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=link.rundown_id, edit=True)

    changed: list[str] = []
    if clear_segment and segment_id is not None:
        raise InvalidArgumentError("Cannot set and clear the segment at the same time")
    if clear_segment:
        link.segment_id = None
        changed.append("segment_id")
    elif segment_id is not None:
        link.segment_id = _resolve_link_segment(db, rundown.id, segment_id)
        changed.append("segment_id")
    if notes is not None:
        link.notes = notes
        changed.append("notes")
    if title is not None:
        link.title = _validate_title(title)
        changed.append("title")
    if description is not None:
        link.description = description
        changed.append("description")
    if questions is not None:
        link.questions = _string_list(questions)
        changed.append("questions")

    db.flush()
    result = _link_to_dict(link)
    db.commit()

    _log.info("story_link_updated", link_id=result["id"], fields=changed, actor_id=actor.actor_id)
    return result


__all__ = ["update_story_link"]
