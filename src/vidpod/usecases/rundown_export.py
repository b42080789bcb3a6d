from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import RundownSegment, RundownStory
from ..shared.types import Actor
from .rundown_add import _format_datetime, _load_rundown, _rundown_to_dict
from .segment_add import _segment_to_dict
from .story_attach import _link_to_dict
from .talent_list import _grouped_talent


def _timing(total: int, target: int | None) -> dict[str, Any]:
    difference = None if target is None else total - target
    return {
        "total_duration": total,
        "target_duration": target,
        "difference": difference,
        "over_target": difference is not None and difference > 0,
    }


def export_rundown(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    rundown_id: str,
) -> dict[str, Any]:
    """
    Build the export document of a rundown.

    Segments come in rank order, each carrying the story links filed under it;
    links without a segment are listed under ``unassigned_stories``. Rendering the
    document to bytes is left to a ``DocumentRenderer``.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator
        rundown_id: Rundown UUID

    Returns:
        Dictionary with ``rundown``, ``segments``, ``unassigned_stories``,
        ``talent``, ``timing`` and ``generated_at``

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

    by_segment: dict[Any, list[dict[str, Any]]] = {}
    unassigned: list[dict[str, Any]] = []
    for link in links:
        if link.segment_id is None:
            unassigned.append(_link_to_dict(link))
        else:
            by_segment.setdefault(link.segment_id, []).append(_link_to_dict(link))

    exported_segments = []
    for segment in segments:
        item = _segment_to_dict(segment)
        item["stories"] = by_segment.get(segment.id, [])
        exported_segments.append(item)

    total = sum(s.duration for s in segments)
    return {
        "rundown": _rundown_to_dict(rundown),
        "segments": exported_segments,
        "unassigned_stories": unassigned,
        "talent": _grouped_talent(db, rundown.id),
        "timing": _timing(total, rundown.target_duration),
        "generated_at": _format_datetime(datetime.now(UTC)),
    }


__all__ = ["export_rundown"]
