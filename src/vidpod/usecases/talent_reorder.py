from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core import ordering
from ..core.access import AccessEvaluator
from ..domain.entities import RundownTalent
from ..shared.types import Actor
from .rundown_add import _load_rundown
from .talent_add import _talent_scope, _talent_to_dict, _validate_role

_log = structlog.get_logger(__name__)


def reorder_talent(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
    role: str,
    ordered_ids: Sequence[Any],
) -> list[dict[str, Any]]:
    """
    Apply a full ordering to one role group.

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not edit the rundown
        InvalidArgumentError: Bad role
        InvalidReorderSetError: Ids are not exactly the group's members
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True, lock=True)
    clean_role = _validate_role(role)

    scope = _talent_scope(rundown.id, clean_role)
    members = {t.id: t for t in db.query(RundownTalent).filter(*scope).all()}
    new_order = ordering.apply_permutation(db, RundownTalent, scope, ordered_ids)

    result = [_talent_to_dict(members[tid]) for tid in new_order]
    db.commit()

    _log.info(
        "talent_reordered",
        rundown_id=str(rundown.id),
        role=clean_role,
        count=len(result),
        actor_id=actor.actor_id,
    )
    return result


__all__ = ["reorder_talent"]
