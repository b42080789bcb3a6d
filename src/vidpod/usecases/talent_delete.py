from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core import ordering
from ..core.access import AccessEvaluator
from ..domain.entities import RundownTalent
from ..shared.types import Actor
from .rundown_add import _check_parent, _load_rundown
from .talent_add import _resolve_talent, _talent_scope

_log = structlog.get_logger(__name__)


def delete_talent(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    talent_id: str,
    rundown_id: str | None = None,
) -> dict[str, Any]:
    """
    Remove a talent entry and renumber its role group.

    Raises:
        NotFoundError: Talent not found
        AccessDeniedError: The actor may not edit the owning rundown
    """
    talent = _resolve_talent(db, talent_id)
    _check_parent(talent.rundown_id, rundown_id, "Talent", talent_id)
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=talent.rundown_id, edit=True, lock=True)

    deleted_id = str(talent.id)
    role = talent.role
    db.delete(talent)
    ordering.compact(db, RundownTalent, _talent_scope(rundown.id, role))
    db.commit()

    _log.info("talent_deleted", rundown_id=str(rundown.id), talent_id=deleted_id, actor_id=actor.actor_id)
    return {"deleted": 1, "id": deleted_id}


__all__ = ["delete_talent"]
