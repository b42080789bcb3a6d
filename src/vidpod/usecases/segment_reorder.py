from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core import ordering
from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment
from ..infra.exceptions import InvalidReorderSetError
from ..shared.types import Actor, Boundary
from .rundown_add import _load_rundown
from .segment_add import _segment_scope, _segment_to_dict

_log = structlog.get_logger(__name__)


def reorder_segments(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
    ordered_ids: Sequence[Any],
) -> list[dict[str, Any]]:
    """
    Apply a full ordering of a rundown's segments.

    The ids must be exactly the rundown's current segment ids, with the leading
    pinned segment first and the trailing pinned segment last. Nothing is
    written when the check fails.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        rundown_id: Rundown UUID
        ordered_ids: Every segment id of the rundown in the desired order

    Returns:
        The segments in their new order

    Raises:
        NotFoundError: Rundown not found
        AccessDeniedError: The actor may not edit the rundown
        InvalidReorderSetError: Id set mismatch or a pinned segment off its boundary
    """
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=rundown_id, edit=True, lock=True)

    segments = db.query(RundownSegment).filter(RundownSegment.rundown_id == rundown.id).all()
    boundary_ids = {s.boundary: s.id for s in segments if s.boundary is not None}
    supplied = [ordering.as_uuid(sid) for sid in ordered_ids]

    leading = boundary_ids.get(Boundary.LEADING.value)
    trailing = boundary_ids.get(Boundary.TRAILING.value)
    if supplied and leading is not None and leading in supplied and supplied[0] != leading:
        raise InvalidReorderSetError("The pinned opening segment must stay first")
    if supplied and trailing is not None and trailing in supplied and supplied[-1] != trailing:
        raise InvalidReorderSetError("The pinned closing segment must stay last")

    new_order = ordering.apply_permutation(db, RundownSegment, _segment_scope(rundown.id), ordered_ids)

    by_id = {s.id: s for s in segments}
    result = [_segment_to_dict(by_id[sid]) for sid in new_order]
    db.commit()

    _log.info("segments_reordered", rundown_id=str(rundown.id), count=len(result), actor_id=actor.actor_id)
    return result


__all__ = ["reorder_segments"]
