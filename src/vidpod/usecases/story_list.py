from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownStory
from ..shared.types import Actor
from .rundown_add import _load_rundown
from .story_attach import _link_to_dict


def list_story_links(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> list[dict[str, Any]]:
    """List the stories attached to a rundown, oldest attachment first."""
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=False)
    links = (
        db.query(RundownStory)
        .filter(RundownStory.rundown_id == rundown.id)
        .order_by(RundownStory.attached_at, RundownStory.id)
        .all()
    )
    return [_link_to_dict(link) for link in links]


__all__ = ["list_story_links"]
