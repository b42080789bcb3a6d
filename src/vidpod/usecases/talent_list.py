from __future__ import annotations

import uuid as uuid_module
from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownTalent
from ..shared.types import Actor, TalentRole
from .rundown_add import _load_rundown
from .talent_add import _talent_to_dict


def _grouped_talent(db: Session, rundown_id: uuid_module.UUID) -> dict[str, list[dict[str, Any]]]:
    rows = (
        db.query(RundownTalent)
        .filter(RundownTalent.rundown_id == rundown_id)
        .order_by(RundownTalent.role, RundownTalent.rank, RundownTalent.id)
        .all()
    )
    grouped: dict[str, list[dict[str, Any]]] = {r.value: [] for r in TalentRole}
    for talent in rows:
        grouped.setdefault(talent.role, []).append(_talent_to_dict(talent))
    return grouped


def list_talent(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> dict[str, list[dict[str, Any]]]:
    """List talent grouped by role (``host``, ``guest``), each group in rank order."""
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=False)
    return _grouped_talent(db, rundown.id)


__all__ = ["list_talent"]
