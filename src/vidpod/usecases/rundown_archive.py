from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..infra.exceptions import AccessDeniedError
from ..shared.types import Actor, RundownStatus
from .rundown_add import _load_rundown, _resolve_rundown, _rundown_to_dict

_log = structlog.get_logger(__name__)


def archive_rundown(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> dict[str, Any]:
    """
    Archive a rundown. Archiving is the soft delete; children are kept.

    Archiving an already archived rundown is a no-op.

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not edit the rundown
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True)

    if rundown.status != RundownStatus.ARCHIVED.value:
        rundown.status = RundownStatus.ARCHIVED.value
        rundown.archived_at = datetime.now(UTC)
        db.flush()
        _log.info("rundown_archived", rundown_id=str(rundown.id), actor_id=actor.actor_id)

    result = _rundown_to_dict(rundown)
    db.commit()
    return result


def purge_rundown(
    db: Session,
    *,
    actor: Actor,
    rundown_id: str,
) -> dict[str, Any]:
    """
    Permanently delete a rundown with its segments, talent and story links.

    Args:
        db: Database session
        actor: Authenticated caller (must be an admin)
        rundown_id: Rundown UUID

    Returns:
        Dictionary with deletion counts

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor is not an admin
    """
    rundown = _resolve_rundown(db, rundown_id, lock=True)
    if not actor.is_admin:
        raise AccessDeniedError("Only admins can permanently delete rundowns")

    counts = {
        "segments": len(rundown.segments),
        "talent": len(rundown.talent),
        "stories": len(rundown.stories),
    }
    purged_id = str(rundown.id)
    db.delete(rundown)
    db.commit()

    _log.warning("rundown_purged", rundown_id=purged_id, actor_id=actor.actor_id, **counts)
    return {"deleted": 1, "id": purged_id, **counts}


__all__ = ["archive_rundown", "purge_rundown"]
