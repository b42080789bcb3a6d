from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..shared.types import Actor, RundownStatus
from .rundown_add import (
    _check_class_assignment,
    _load_rundown,
    _normalize_class_id,
    _parse_scheduled_date,
    _rundown_to_dict,
    _validate_sharing,
    _validate_status,
    _validate_target_duration,
    _validate_title,
)

_log = structlog.get_logger(__name__)


def update_rundown(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
    title: str | None = None,
    description: str | None = None,
    scheduled_date: str | datetime | None = None,
    target_duration: int | None = None,
    class_id: str | None = None,
    share_with_class: bool | None = None,
    status: str | None = None,
    clear_description: bool = False,
    clear_scheduled_date: bool = False,
    clear_target_duration: bool = False,
    clear_class: bool = False,
) -> dict[str, Any]:
    """
    Patch a rundown. Unset fields keep their value; ``clear_*`` flags null a field.

    The share/class rule is checked against the merged result, so clearing the
    class of a shared rundown is rejected unless sharing is turned off too.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        rundown_id: Rundown UUID
        title: New title
        description: New description
        scheduled_date: New air date (ISO-8601)
        target_duration: New target in seconds
        class_id: New owning class
        share_with_class: New sharing flag
        status: New status (draft, in_progress, archived)
        clear_description: Remove the description
        clear_scheduled_date: Remove the air date
        clear_target_duration: Remove the target
        clear_class: Remove the class assignment

    Returns:
        Dictionary with updated rundown details

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not edit the rundown or assign the class
        InvalidArgumentError: Invalid field value or shared without class
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True)

    changed: list[str] = []
    if title is not None:
        rundown.title = _validate_title(title)
        changed.append("title")

    if clear_description:
        rundown.description = None
        changed.append("description")
    elif description is not None:
        rundown.description = description
        changed.append("description")

    if clear_scheduled_date:
        rundown.scheduled_date = None
        changed.append("scheduled_date")
    elif scheduled_date is not None:
        rundown.scheduled_date = _parse_scheduled_date(scheduled_date)
        changed.append("scheduled_date")

    if clear_target_duration:
        rundown.target_duration = None
        changed.append("target_duration")
    elif target_duration is not None:
        rundown.target_duration = _validate_target_duration(target_duration)
        changed.append("target_duration")

    new_class_id = rundown.class_id
    if clear_class:
        new_class_id = None
    elif class_id is not None:
        new_class_id = _normalize_class_id(class_id)
    new_share = rundown.share_with_class if share_with_class is None else bool(share_with_class)

    _validate_sharing(new_share, new_class_id)
    if new_class_id != rundown.class_id:
        _check_class_assignment(access, actor, new_class_id)
        rundown.class_id = new_class_id
        changed.append("class_id")
    if new_share != rundown.share_with_class:
        rundown.share_with_class = new_share
        changed.append("share_with_class")

    if status is not None:
        new_status = _validate_status(status)
        if new_status != rundown.status:
            rundown.status = new_status
            rundown.archived_at = (
                datetime.now(UTC) if new_status == RundownStatus.ARCHIVED.value else None
            )
            changed.append("status")

    db.flush()
    db.refresh(rundown)
    result = _rundown_to_dict(rundown)
    db.commit()

    _log.info("rundown_updated", rundown_id=result["id"], fields=changed, actor_id=actor.actor_id)
    return result


__all__ = ["update_rundown"]
