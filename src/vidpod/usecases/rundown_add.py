from __future__ import annotations

import uuid as uuid_module
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import Rundown, RundownSegment
from ..infra.exceptions import AccessDeniedError, InvalidArgumentError, NotFoundError
from ..shared.types import Actor, Boundary, RundownStatus, SegmentType

_log = structlog.get_logger(__name__)

TITLE_MAX_LENGTH = 255

# Boundary segments created with every rundown: (title, type, duration, boundary)
BOUNDARY_SEGMENTS = (
    ("Intro", SegmentType.INTRO.value, 60, Boundary.LEADING.value),
    ("Outro", SegmentType.OUTRO.value, 30, Boundary.TRAILING.value),
)


def _parse_id(value: Any, label: str) -> uuid_module.UUID:
    """Parse an identifier; malformed identifiers resolve to nothing.

    Raises NotFoundError if the value is not a UUID.
    """
    if isinstance(value, uuid_module.UUID):
        return value
    try:
        return uuid_module.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFoundError(f"{label} '{value}' not found")


def _resolve_rundown(db: Session, rundown_id: Any, *, lock: bool = False) -> Rundown:
    """Fetch a rundown, optionally taking a row lock for sibling renumbering.

    The row lock serializes concurrent inserts, deletes and reorders on the same
    rundown without blocking unrelated rundowns.

    Raises NotFoundError if the rundown does not exist.
    """
    rid = _parse_id(rundown_id, "Rundown")
    query = db.query(Rundown).filter(Rundown.id == rid)
    if lock:
        query = query.with_for_update()
    rundown = query.one_or_none()
    if rundown is None:
        raise NotFoundError(f"Rundown '{rundown_id}' not found")
    return rundown


def _load_rundown(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: Any,
    edit: bool,
    lock: bool = False,
) -> Rundown:
    """Resolve a rundown and check the actor's right on it (existence first)."""
    rundown = _resolve_rundown(db, rundown_id, lock=lock)
    access.require(rundown, actor, edit=edit)
    return rundown


def _check_parent(owner_id: uuid_module.UUID, rundown_id: Any, label: str, child_id: Any) -> None:
    """When a rundown is named, the child must belong to it.

    Raises NotFoundError if the child belongs to another rundown.
    """
    if rundown_id is None:
        return
    if owner_id != _parse_id(rundown_id, "Rundown"):
        raise NotFoundError(f"{label} '{child_id}' not found in this rundown")


def _validate_title(title: str | None, label: str = "Title") -> str:
    """Trim and validate a title.

    Raises InvalidArgumentError if missing or too long.
    """
    cleaned = (title or "").strip()
    if not cleaned:
        raise InvalidArgumentError(f"{label} is required")
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise InvalidArgumentError(f"{label} must be at most {TITLE_MAX_LENGTH} characters")
    return cleaned


def _parse_scheduled_date(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 air date (date or date-time). Naive values are taken as UTC.

    Raises InvalidArgumentError if the format is invalid.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid scheduled date. Use ISO-8601: {e}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _validate_target_duration(value: int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError("Target duration must be a non-negative number of seconds")
    return value


def _validate_status(status: str) -> str:
    try:
        return RundownStatus(status.strip().lower()).value
    except ValueError:
        valid = ", ".join(s.value for s in RundownStatus)
        raise InvalidArgumentError(f"Invalid status '{status}'. Valid values: {valid}")


def _normalize_class_id(class_id: str | None) -> str | None:
    if class_id is None:
        return None
    cleaned = str(class_id).strip()
    return cleaned or None


def _validate_sharing(share_with_class: bool, class_id: str | None) -> None:
    """A rundown shared with its class must have a class."""
    if share_with_class and class_id is None:
        raise InvalidArgumentError("A rundown shared with its class must be assigned to a class")


def _check_class_assignment(access: AccessEvaluator, actor: Actor, class_id: str | None) -> None:
    if class_id is not None and not access.may_assign_class(actor, class_id):
        raise AccessDeniedError(f"Access denied to class '{class_id}'")


def _format_datetime(dt: datetime | None) -> str | None:
    """Format datetime for output in ISO-8601 UTC format."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.isoformat() + "Z"
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _rundown_to_dict(rundown: Rundown) -> dict[str, Any]:
    return {
        "id": str(rundown.id),
        "title": rundown.title,
        "description": rundown.description,
        "scheduled_date": _format_datetime(rundown.scheduled_date),
        "target_duration": rundown.target_duration,
        "share_with_class": rundown.share_with_class,
        "status": rundown.status,
        "created_by": rundown.created_by,
        "class_id": rundown.class_id,
        "created_at": _format_datetime(rundown.created_at),
        "updated_at": _format_datetime(rundown.updated_at),
        "archived_at": _format_datetime(rundown.archived_at),
    }


def add_rundown(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    title: str,
    description: str | None = None,
    scheduled_date: str | datetime | None = None,
    target_duration: int | None = None,
    class_id: str | None = None,
    share_with_class: bool = False,
) -> dict[str, Any]:
    """Create a Rundown with its two pinned boundary segments.

    Any authenticated actor may create a rundown. Placing it in a class requires
    being an admin, the class's teacher, or a student enrolled in it.

    Args:
        db: Database session
        actor: Authenticated caller (becomes the creator)
        access: Access evaluator
        title: Rundown title (required)
        description: Optional description
        scheduled_date: Optional air date (ISO-8601)
        target_duration: Optional target total duration in seconds
        class_id: Optional owning class
        share_with_class: Make the rundown readable by enrolled students

    Returns:
        Dictionary with rundown details

    Raises:
        InvalidArgumentError: Missing title, bad date/duration, shared without class
        AccessDeniedError: The actor may not assign the class
    """
    clean_title = _validate_title(title)
    parsed_date = _parse_scheduled_date(scheduled_date)
    target = _validate_target_duration(target_duration)
    clean_class_id = _normalize_class_id(class_id)
    _validate_sharing(share_with_class, clean_class_id)
    _check_class_assignment(access, actor, clean_class_id)

    rundown = Rundown(
        title=clean_title,
        description=description,
        scheduled_date=parsed_date,
        target_duration=target,
        share_with_class=share_with_class,
        status=RundownStatus.DRAFT.value,
        created_by=actor.actor_id,
        class_id=clean_class_id,
    )
    db.add(rundown)
    db.flush()

    for rank, (seg_title, seg_type, duration, boundary) in enumerate(BOUNDARY_SEGMENTS):
        db.add(
            RundownSegment(
                rundown_id=rundown.id,
                title=seg_title,
                segment_type=seg_type,
                duration=duration,
                rank=rank,
                boundary=boundary,
                content={},
            )
        )
    db.flush()

    result = _rundown_to_dict(rundown)
    db.commit()

    _log.info("rundown_created", rundown_id=result["id"], actor_id=actor.actor_id, class_id=clean_class_id)
    return result


__all__ = ["add_rundown"]
