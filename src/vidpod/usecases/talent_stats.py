from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..shared.types import Actor
from .rundown_add import _load_rundown
from .talent_add import _talent_limit
from .talent_list import _grouped_talent


def talent_stats(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> dict[str, Any]:
    """Summarize the roster: counts and names per role and the slots left."""
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=False)
    grouped = _grouped_talent(db, rundown.id)

    total = sum(len(members) for members in grouped.values())
    limit = _talent_limit()
    return {
        "rundown_id": str(rundown.id),
        "total": total,
        "limit": limit,
        "remaining_slots": max(limit - total, 0),
        "roles": {
            role: {"count": len(members), "names": [m["name"] for m in members]}
            for role, members in grouped.items()
        },
    }


__all__ = ["talent_stats"]
