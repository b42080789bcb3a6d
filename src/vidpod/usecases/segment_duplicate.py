from __future__ import annotations

import copy
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..core import ordering
from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment
from ..shared.types import DEFAULT_SEGMENT_STATUS, Actor
from .rundown_add import TITLE_MAX_LENGTH, _check_parent, _load_rundown
from .segment_add import _compact_segments, _resolve_segment, _segment_scope, _segment_to_dict

_log = structlog.get_logger(__name__)

COPY_SUFFIX = " (Copy)"


def _copy_title(title: str) -> str:
    return title[: TITLE_MAX_LENGTH - len(COPY_SUFFIX)] + COPY_SUFFIX


def duplicate_segment(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    segment_id: str,
    rundown_id: str | None = None,
) -> dict[str, Any]:
    """
    Clone a segment directly after its source.

    The copy keeps duration, type and content; its title gets a " (Copy)" suffix,
    status resets to Draft and it is never pinned or expanded. Copying the
    trailing pinned segment places the copy directly before it.

    Raises:
        NotFoundError: Segment not found
        AccessDeniedError: The actor may not edit the owning rundown
    """
    source = _resolve_segment(db, segment_id)
    _check_parent(source.rundown_id, rundown_id, "Segment", segment_id)
    rundown = _load_rundown(db, actor=actor, access=access, rundown_id=source.rundown_id, edit=True, lock=True)

    new_rank = source.rank if source.is_trailing else source.rank + 1
    ordering.shift_up(db, RundownSegment, _segment_scope(rundown.id), new_rank)

    clone = RundownSegment(
        rundown_id=rundown.id,
        title=_copy_title(source.title),
        duration=source.duration,
        segment_type=source.segment_type,
        rank=new_rank,
        status=DEFAULT_SEGMENT_STATUS,
        content=copy.deepcopy(source.content or {}),
        boundary=None,
        expanded=False,
    )
    db.add(clone)
    _compact_segments(db, rundown.id)
    db.refresh(clone)

    result = _segment_to_dict(clone)
    db.commit()

    _log.info(
        "segment_duplicated",
        source_id=str(source.id),
        segment_id=result["id"],
        rank=result["rank"],
        actor_id=actor.actor_id,
    )
    return result


__all__ = ["duplicate_segment"]
