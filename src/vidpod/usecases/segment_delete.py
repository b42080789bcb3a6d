from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownStory
from ..infra.exceptions import ConflictError
from ..shared.types import Actor
from .rundown_add import _check_parent, _load_rundown
from .segment_add import _compact_segments, _resolve_segment

_log = structlog.get_logger(__name__)


def delete_segment(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    segment_id: str,
    rundown_id: str | None = None,
) -> dict[str, Any]:
    """
    Delete an unpinned segment and close the rank gap it leaves.

    Story links pointing at the segment stay on the rundown, unassigned.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        segment_id: Segment UUID
        rundown_id: Optional rundown the segment must belong to

    Returns:
        Dictionary with deletion status

    Raises:
        NotFoundError: Segment not found
        AccessDeniedError: The actor may not edit the owning rundown
        ConflictError: The segment is pinned
    """
    segment = _resolve_segment(db, segment_id)
    _check_parent(segment.rundown_id, rundown_id, "Segment", segment_id)
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=segment.rundown_id, edit=True, lock=True)

    if segment.pinned:
        raise ConflictError(f"Segment '{segment.title}' is pinned and cannot be deleted")

    unlinked = db.execute(
        update(RundownStory)
        .where(RundownStory.segment_id == segment.id)
        .values(segment_id=None)
        .execution_options(synchronize_session="fetch")
    ).rowcount

    deleted_id = str(segment.id)
    db.delete(segment)
    _compact_segments(db, rundown.id)
    db.commit()

    _log.info(
        "segment_deleted",
        rundown_id=str(rundown.id),
        segment_id=deleted_id,
        unlinked_stories=unlinked,
        actor_id=actor.actor_id,
    )
    return {"deleted": 1, "id": deleted_id, "unlinked_stories": unlinked}


__all__ = ["delete_segment"]
