from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment
from ..shared.types import Actor
from .rundown_add import _load_rundown
from .segment_add import _segment_to_dict


def list_segments(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> list[dict[str, Any]]:
    """
    List a rundown's segments in rank order.

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not view the rundown
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=False)
    segments = (
        db.query(RundownSegment)
        .filter(RundownSegment.rundown_id == rundown.id)
        .order_by(RundownSegment.rank, RundownSegment.id)
        .all()
    )
    return [_segment_to_dict(s) for s in segments]


__all__ = ["list_segments"]
