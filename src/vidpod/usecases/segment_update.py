from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..shared.types import Actor
from .rundown_add import _check_parent, _load_rundown, _validate_title
from .segment_add import (
    _resolve_segment,
    _segment_to_dict,
    _validate_content,
    _validate_duration,
    _validate_segment_type,
)

_log = structlog.get_logger(__name__)


def update_segment(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    segment_id: str,
    rundown_id: str | None = None,
    title: str | None = None,
    duration: int | None = None,
    segment_type: str | None = None,
    status: str | None = None,
    content: dict[str, Any] | None = None,
    expanded: bool | None = None,
) -> dict[str, Any]:
    """
    Patch a segment. Unset fields keep their value; rank and pinning never change here.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        segment_id: Segment UUID
        rundown_id: Optional rundown the segment must belong to
        title: New title
        duration: New duration in seconds
        segment_type: New type tag
        status: New production status
        content: Replacement content payload
        expanded: UI expansion hint

    Returns:
        Dictionary with updated segment details

    Raises:
        NotFoundError: Segment not found
        AccessDeniedError: The actor may not edit the owning rundown
        InvalidArgumentError: Invalid field value
    """
    segment = _resolve_segment(db, segment_id)
    _check_parent(segment.rundown_id, rundown_id, "Segment", segment_id)
    _load_rundown(db, actor=actor, access=access, rundown_id=segment.rundown_id, edit=True)

    changed: list[str] = []
    if title is not None:
        segment.title = _validate_title(title)
        changed.append("title")
    if duration is not None:
        segment.duration = _validate_duration(duration)
        changed.append("duration")
    if segment_type is not None:
        segment.segment_type = _validate_segment_type(segment_type)
        changed.append("type")
    if status is not None:
        segment.status = status.strip() or segment.status
        changed.append("status")
    if content is not None:
        segment.content = _validate_content(content)
        changed.append("content")
    if expanded is not None:
        segment.expanded = bool(expanded)
        changed.append("expanded")

    db.flush()
    result = _segment_to_dict(segment)
    db.commit()

    _log.info("segment_updated", segment_id=result["id"], fields=changed, actor_id=actor.actor_id)
    return result


__all__ = ["update_segment"]
