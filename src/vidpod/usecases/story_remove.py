from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..shared.types import Actor
from .rundown_add import _check_parent, _load_rundown
from .story_attach import _resolve_link

_log = structlog.get_logger(__name__)


def remove_story_link(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    link_id: str,
    rundown_id: str | None = None,
) -> dict[str, Any]:
    """
    Detach a story from its rundown. The source story is untouched.

    Raises:
        NotFoundError: Story link not found
        AccessDeniedError: The actor may not edit the owning rundown
    """
    link = _resolve_link(db, link_id)
    _check_parent(link.rundown_id, rundown_id, "Story link", link_id)
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=link.rundown_id, edit=True)

    removed_id = str(link.id)
    source_story_id = link.source_story_id
    db.delete(link)
    db.commit()

    _log.info(
        "story_link_removed",
        rundown_id=str(rundown.id),
        link_id=removed_id,
        source_story_id=source_story_id,
        actor_id=actor.actor_id,
    )
    return {"deleted": 1, "id": removed_id}


__all__ = ["remove_story_link"]
