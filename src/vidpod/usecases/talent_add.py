from __future__ import annotations

import uuid as uuid_module
from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownTalent
from ..infra.exceptions import ConflictError, InvalidArgumentError, LimitReachedError, NotFoundError
from ..infra.settings import settings
from ..shared.types import Actor, TalentRole
from .rundown_add import _format_datetime, _load_rundown, _parse_id

_log = structlog.get_logger(__name__)

NAME_MAX_LENGTH = 100


def _talent_limit() -> int:
    return settings.talent_limit


def _talent_scope(rundown_id: uuid_module.UUID, role: str) -> list:
    return [RundownTalent.rundown_id == rundown_id, RundownTalent.role == role]


def _validate_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidArgumentError("Talent name is required")
    if len(cleaned) > NAME_MAX_LENGTH:
        raise InvalidArgumentError(f"Talent name must be at most {NAME_MAX_LENGTH} characters")
    return cleaned


def _validate_role(role: str | None) -> str:
    try:
        return TalentRole((role or "").strip().lower()).value
    except ValueError:
        raise InvalidArgumentError(f"Invalid role '{role}'. Valid roles: host, guest")


def _check_name_available(
    db: Session,
    rundown_id: uuid_module.UUID,
    name: str,
    exclude_id: uuid_module.UUID | None = None,
) -> None:
    """Names are unique per rundown, ignoring case.

    Raises ConflictError if another talent already uses the name.
    """
    query = db.query(RundownTalent).filter(
        RundownTalent.rundown_id == rundown_id,
        func.lower(RundownTalent.name) == name.lower(),
    )
    if exclude_id is not None:
        query = query.filter(RundownTalent.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Talent named '{name}' already exists in this rundown")


def _resolve_talent(db: Session, talent_id: Any) -> RundownTalent:
    tid = _parse_id(talent_id, "Talent")
    talent = db.query(RundownTalent).filter(RundownTalent.id == tid).one_or_none()
    if talent is None:
        raise NotFoundError(f"Talent '{talent_id}' not found")
    return talent


def _talent_to_dict(talent: RundownTalent) -> dict[str, Any]:
    return {
        "id": str(talent.id),
        "rundown_id": str(talent.rundown_id),
        "name": talent.name,
        "role": talent.role,
        "rank": talent.rank,
        "bio": talent.bio,
        "notes": talent.notes,
        "created_at": _format_datetime(talent.created_at),
    }


def add_talent(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
    name: str,
    role: str,
    bio: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Add a host or guest to the end of its role group.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        rundown_id: Rundown UUID
        name: Display name, unique per rundown ignoring case
        role: 'host' or 'guest'
        bio: Optional short biography
        notes: Optional producer notes

    Returns:
        Dictionary with talent details

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not edit the rundown
        InvalidArgumentError: Bad role or name
        LimitReachedError: The roster is full
        ConflictError: Name already used in this rundown
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True, lock=True)

    clean_role = _validate_role(role)
    clean_name = _validate_name(name)

    limit = _talent_limit()
    total = db.query(func.count(RundownTalent.id)).filter(RundownTalent.rundown_id == rundown.id).scalar() or 0
    if total >= limit:
        raise LimitReachedError(f"Maximum of {limit} talent per rundown reached")

    _check_name_available(db, rundown.id, clean_name)

    group_size = (
        db.query(func.count(RundownTalent.id))
        .filter(*_talent_scope(rundown.id, clean_role))
        .scalar()
        or 0
    )
    talent = RundownTalent(
        rundown_id=rundown.id,
        name=clean_name,
        role=clean_role,
        rank=group_size,
        bio=bio,
        notes=notes,
    )
    db.add(talent)
    db.flush()

    result = _talent_to_dict(talent)
    db.commit()

    _log.info(
        "talent_added",
        rundown_id=str(rundown.id),
        talent_id=result["id"],
        role=clean_role,
        actor_id=actor.actor_id,
    )
    return result


__all__ = ["add_talent"]
