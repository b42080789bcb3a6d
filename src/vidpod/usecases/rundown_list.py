from __future__ import annotations

from typing import Any

from sqlalchemy import and_, false, func, or_, select
from sqlalchemy.orm import Session

from ..core.access import AccessEvaluator
from ..domain.entities import Rundown, RundownSegment, RundownStory, RundownTalent
from ..shared.types import Actor, Role, RundownStatus
from .rundown_add import _rundown_to_dict


def _visibility_filter(access: AccessEvaluator, actor: Actor):
    """SQL criteria matching the rundowns the actor may view."""
    if actor.role is Role.ADMIN:
        return None
    criteria = [Rundown.created_by == actor.actor_id]
    if actor.role is Role.TEACHER:
        taught = access.roster.taught_class_ids(actor.actor_id)
        if taught:
            criteria.append(Rundown.class_id.in_(sorted(taught)))
    elif actor.role is Role.STUDENT:
        enrolled = access.roster.enrolled_class_ids(actor.actor_id)
        if enrolled:
            criteria.append(
                and_(Rundown.share_with_class.is_(True), Rundown.class_id.in_(sorted(enrolled)))
            )
    return or_(false(), *criteria)


def _count_by_rundown(db: Session, model: type, rundown_ids: list) -> dict:
    if not rundown_ids:
        return {}
    stmt = (
        select(model.rundown_id, func.count(model.id))
        .where(model.rundown_id.in_(rundown_ids))
        .group_by(model.rundown_id)
    )
    return {rid: count for rid, count in db.execute(stmt)}


def list_rundowns(
    db: Session,
    *,
    actor: Actor,
    access: AccessEvaluator,
    include_archived: bool = False,
) -> list[dict[str, Any]]:
    """
    List the rundowns the actor may view, newest first, with child counts.

    Args:
        db: Database session
        actor: Authenticated caller
        access: Access evaluator (its roster supplies the class id sets)
        include_archived: Include archived rundowns

    Returns:
        List of rundown dictionaries with ``segment_count``, ``talent_count``,
        ``story_count``, ``total_duration`` and ``can_edit``
    """
    query = db.query(Rundown)
    visibility = _visibility_filter(access, actor)
    if visibility is not None:
        query = query.filter(visibility)
    if not include_archived:
        query = query.filter(Rundown.status != RundownStatus.ARCHIVED.value)
    rundowns = query.order_by(Rundown.created_at.desc(), Rundown.id).all()

    ids = [r.id for r in rundowns]
    segment_counts = _count_by_rundown(db, RundownSegment, ids)
    talent_counts = _count_by_rundown(db, RundownTalent, ids)
    story_counts = _count_by_rundown(db, RundownStory, ids)
    durations: dict = {}
    if ids:
        stmt = (
            select(RundownSegment.rundown_id, func.coalesce(func.sum(RundownSegment.duration), 0))
            .where(RundownSegment.rundown_id.in_(ids))
            .group_by(RundownSegment.rundown_id)
        )
        durations = {rid: int(total) for rid, total in db.execute(stmt)}

    results = []
    for rundown in rundowns:
        item = _rundown_to_dict(rundown)
        item["segment_count"] = segment_counts.get(rundown.id, 0)
        item["talent_count"] = talent_counts.get(rundown.id, 0)
        item["story_count"] = story_counts.get(rundown.id, 0)
        item["total_duration"] = durations.get(rundown.id, 0)
        item["can_edit"] = access.can_edit(rundown, actor)
        results.append(item)
    return results


__all__ = ["list_rundowns"]
