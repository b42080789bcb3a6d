from __future__ import annotations

import uuid as uuid_module
from typing import Any

import structlog
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ..core import ordering
from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment
from ..infra.exceptions import InvalidArgumentError, NotFoundError
from ..shared.types import (
    DEFAULT_SEGMENT_DURATION,
    DEFAULT_SEGMENT_STATUS,
    Actor,
    Boundary,
    SegmentType,
)
from .rundown_add import _format_datetime, _load_rundown, _parse_id, _validate_title

_log = structlog.get_logger(__name__)

SEGMENT_TYPE_MAX_LENGTH = 50


def _segment_scope(rundown_id: uuid_module.UUID) -> list:
    return [RundownSegment.rundown_id == rundown_id]


def _segment_order() -> tuple:
    """Canonical sibling order: leading pinned first, trailing pinned last, then rank."""
    return (
        case(
            (RundownSegment.boundary == Boundary.LEADING.value, 0),
            (RundownSegment.boundary == Boundary.TRAILING.value, 2),
            else_=1,
        ),
        RundownSegment.rank,
        RundownSegment.created_at,
        RundownSegment.id,
    )


def _compact_segments(db: Session, rundown_id: uuid_module.UUID) -> None:
    ordering.compact(db, RundownSegment, _segment_scope(rundown_id), _segment_order())


def _resolve_segment(db: Session, segment_id: Any) -> RundownSegment:
    """Fetch a segment by id.

    Raises NotFoundError if it does not exist.
    """
    sid = _parse_id(segment_id, "Segment")
    segment = db.query(RundownSegment).filter(RundownSegment.id == sid).one_or_none()
    if segment is None:
        raise NotFoundError(f"Segment '{segment_id}' not found")
    return segment


def _resolve_segment_in(db: Session, rundown_id: uuid_module.UUID, segment_id: Any) -> RundownSegment:
    """Fetch a segment that must belong to the given rundown.

    Raises NotFoundError if it does not exist or belongs elsewhere.
    """
    segment = _resolve_segment(db, segment_id)
    if segment.rundown_id != rundown_id:
        raise NotFoundError(f"Segment '{segment_id}' not found in this rundown")
    return segment


def _trailing_segment(db: Session, rundown_id: uuid_module.UUID) -> RundownSegment | None:
    return (
        db.query(RundownSegment)
        .filter(
            RundownSegment.rundown_id == rundown_id,
            RundownSegment.boundary == Boundary.TRAILING.value,
        )
        .one_or_none()
    )


def _validate_segment_type(segment_type: str | None) -> str:
    cleaned = (segment_type or SegmentType.SEGMENT.value).strip().lower()
    if not cleaned:
        return SegmentType.SEGMENT.value
    if len(cleaned) > SEGMENT_TYPE_MAX_LENGTH:
        raise InvalidArgumentError(f"Segment type must be at most {SEGMENT_TYPE_MAX_LENGTH} characters")
    return cleaned


def _validate_duration(duration: int | None, default: int = DEFAULT_SEGMENT_DURATION) -> int:
    if duration is None:
        return default
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise InvalidArgumentError("Duration must be a non-negative number of seconds")
    return duration


def _validate_content(content: dict[str, Any] | None) -> dict[str, Any]:
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise InvalidArgumentError("Segment content must be an object")
    return content


def _segment_to_dict(segment: RundownSegment) -> dict[str, Any]:
    return {
        "id": str(segment.id),
        "rundown_id": str(segment.rundown_id),
        "title": segment.title,
        "duration": segment.duration,
        "type": segment.segment_type,
        "rank": segment.rank,
        "status": segment.status,
        "content": segment.content or {},
        "pinned": segment.pinned,
        "boundary": segment.boundary,
        "expanded": segment.expanded,
        "created_at": _format_datetime(segment.created_at),
        "updated_at": _format_datetime(segment.updated_at),
    }


def add_segment(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
    title: str,
    duration: int | None = None,
    segment_type: str | None = None,
    content: dict[str, Any] | None = None,
    status: str | None = None,
    insert_after: str | None = None,
) -> dict[str, Any]:
    """Insert a segment into a rundown and return it.

    With ``insert_after`` the new segment takes the anchor's rank + 1 and every
    sibling at or above that rank shifts up. Without an anchor it goes directly
    before the trailing pinned segment, which shifts to stay last.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        rundown_id: Rundown UUID
        title: Segment title (required)
        duration: Seconds (default 60)
        segment_type: Type tag (default 'segment')
        content: Opaque structured payload
        status: Production status (default 'Draft')
        insert_after: Optional anchor segment UUID within the same rundown

    Returns:
        Dictionary with segment details

    Raises:
        NotFoundError: Rundown or anchor segment not found in the rundown
        AccessDeniedError: The actor may not edit the rundown
        InvalidArgumentError: Bad input, or anchor is the trailing pinned segment
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True, lock=True)

    clean_title = _validate_title(title)
    clean_type = _validate_segment_type(segment_type)
    clean_duration = _validate_duration(duration)
    clean_content = _validate_content(content)
    clean_status = (status or DEFAULT_SEGMENT_STATUS).strip() or DEFAULT_SEGMENT_STATUS

    scope = _segment_scope(rundown.id)

    if insert_after is not None:
        anchor = _resolve_segment_in(db, rundown.id, insert_after)
        if anchor.is_trailing:
            raise InvalidArgumentError("Cannot insert after the pinned closing segment")
        new_rank = anchor.rank + 1
    else:
        trailing = _trailing_segment(db, rundown.id)
        if trailing is not None:
            new_rank = trailing.rank
        else:
            max_rank = (
                db.query(func.max(RundownSegment.rank))
                .filter(RundownSegment.rundown_id == rundown.id)
                .scalar()
            )
            new_rank = -1 if max_rank is None else max_rank
            new_rank += 1

    ordering.shift_up(db, RundownSegment, scope, new_rank)

    segment = RundownSegment(
        rundown_id=rundown.id,
        title=clean_title,
        duration=clean_duration,
        segment_type=clean_type,
        rank=new_rank,
        status=clean_status,
        content=clean_content,
        boundary=None,
        expanded=False,
    )
    db.add(segment)
    _compact_segments(db, rundown.id)
    db.refresh(segment)

    result = _segment_to_dict(segment)
    db.commit()

    _log.info(
        "segment_added",
        rundown_id=str(rundown.id),
        segment_id=result["id"],
        rank=result["rank"],
        actor_id=actor.actor_id,
    )
    return result


__all__ = ["add_segment"]
