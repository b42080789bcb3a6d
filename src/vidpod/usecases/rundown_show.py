from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment, RundownStory
from ..shared.types import Actor
from .rundown_add import _load_rundown, _rundown_to_dict
from .segment_add import _segment_to_dict
from .story_attach import _link_to_dict
from .talent_list import _grouped_talent


def show_rundown(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> dict[str, Any]:
    """
    Return a rundown with its segments, talent, story links and the actor's permissions.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        rundown_id: Rundown UUID

    Returns:
        Dictionary with rundown details plus ``segments``, ``talent``,
        ``stories`` and ``permissions``

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
    links = (
        db.query(RundownStory)
        .filter(RundownStory.rundown_id == rundown.id)
        .order_by(RundownStory.attached_at, RundownStory.id)
        .all()
    )

    result = _rundown_to_dict(rundown)
    result["segments"] = [_segment_to_dict(s) for s in segments]
    result["talent"] = _grouped_talent(db, rundown.id)
    result["stories"] = [_link_to_dict(link) for link in links]
    result["permissions"] = {
        "can_view": True,
        "can_edit": access.can_edit(rundown, actor),
    }
    return result


__all__ = ["show_rundown"]
