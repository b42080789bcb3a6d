from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core import ordering
from ..core.access import AccessEvaluator
from ..domain.entities import RundownTalent
from ..shared.types import Actor
from .rundown_add import _check_parent, _load_rundown
from .talent_add import (
    _check_name_available,
    _resolve_talent,
    _talent_scope,
    _talent_to_dict,
    _validate_name,
    _validate_role,
)

_log = structlog.get_logger(__name__)


def update_talent(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    talent_id: str,
    rundown_id: str | None = None,
    name: str | None = None,
    role: str | None = None,
    rank: int | None = None,
    bio: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Patch a talent entry.

    A role change moves the talent to the end of the new group and closes the
    gap in the old one; a rank then applies within the new group.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        talent_id: Talent UUID
        rundown_id: Optional rundown the talent must belong to
        name: New name (re-checked for duplicates, excluding this talent)
        role: New role group
        rank: New position within the role group
        bio: New biography
        notes: New notes

    Returns:
        Dictionary with updated talent details

    Raises:
        NotFoundError: Talent not found
        AccessDeniedError: The actor may not edit the owning rundown
        InvalidArgumentError: Bad role, name or out-of-range rank
        ConflictError: Name already used in this rundown
    """
    talent = _resolve_talent(db, talent_id)
    _check_parent(talent.rundown_id, rundown_id, "Talent", talent_id)
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=talent.rundown_id, edit=True, lock=True)

    changed: list[str] = []
    if name is not None:
        clean_name = _validate_name(name)
        _check_name_available(db, rundown.id, clean_name, exclude_id=talent.id)
        talent.name = clean_name
        changed.append("name")
    if bio is not None:
        talent.bio = bio
        changed.append("bio")
    if notes is not None:
        talent.notes = notes
        changed.append("notes")

    if role is not None:
        new_role = _validate_role(role)
        if new_role != talent.role:
            old_role = talent.role
            group_size = (
                db.query(func.count(RundownTalent.id))
                .filter(*_talent_scope(rundown.id, new_role))
                .scalar()
                or 0
            )
            talent.role = new_role
            talent.rank = group_size
            db.flush()
            ordering.compact(db, RundownTalent, _talent_scope(rundown.id, old_role))
            changed.append("role")

    if rank is not None:
        ordering.move(db, RundownTalent, _talent_scope(rundown.id, talent.role), talent.id, rank)
        changed.append("rank")

    db.flush()
    db.refresh(talent)
    result = _talent_to_dict(talent)
    db.commit()

    _log.info("talent_updated", talent_id=result["id"], fields=changed, actor_id=actor.actor_id)
    return result


__all__ = ["update_talent"]
