"""
Sibling ordering primitive.

Ranks are zero-based and contiguous within a sibling scope: the segments of one
rundown, or the talent of one (rundown, role) group. A scope is a list of SQL
criteria selecting the siblings.

Renumbering is one bulk UPDATE assigning ``rank = position`` for the whole
ordered id list, never a loop of per-row writes. Nothing here commits; callers
run these inside their unit of work so a failure rolls back the mutation that
triggered the renumbering as well.
"""

from __future__ import annotations

import uuid as uuid_module
from collections.abc import Sequence
from typing import Any

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from ..infra.exceptions import InvalidArgumentError, InvalidReorderSetError

Scope = Sequence[ColumnElement[bool]]


def as_uuid(value: Any) -> uuid_module.UUID | None:
    """Parse any spelling ``uuid.UUID`` accepts; None when the value is not an id."""
    if isinstance(value, uuid_module.UUID):
        return value
    try:
        return uuid_module.UUID(str(value))
    except (TypeError, ValueError):
        return None


def sibling_ids(
    db: Session,
    model: type,
    scope: Scope,
    order_by: Sequence[Any] | None = None,
) -> list[uuid_module.UUID]:
    """Return sibling ids in their current order (rank, then id for ties)."""
    db.flush()
    stmt = select(model.id).where(*scope).order_by(*(order_by or (model.rank, model.id)))
    return list(db.scalars(stmt))


def renumber(db: Session, model: type, ordered_ids: Sequence[uuid_module.UUID]) -> None:
    """Assign rank 0..N-1 to ``ordered_ids`` in list order with a single UPDATE."""
    if not ordered_ids:
        return
    db.flush()
    rank_by_position = case(
        *[(model.id == sibling_id, position) for position, sibling_id in enumerate(ordered_ids)],
        else_=model.rank,
    )
    db.execute(
        update(model)
        .where(model.id.in_(list(ordered_ids)))
        .values({model.rank: rank_by_position})
        .execution_options(synchronize_session="fetch")
    )


def shift_up(db: Session, model: type, scope: Scope, from_rank: int) -> None:
    """Open a gap at ``from_rank``: every sibling with rank >= from_rank moves up by one."""
    db.flush()
    db.execute(
        update(model)
        .where(*scope, model.rank >= from_rank)
        .values({model.rank: model.rank + 1})
        .execution_options(synchronize_session="fetch")
    )


def compact(
    db: Session,
    model: type,
    scope: Scope,
    order_by: Sequence[Any] | None = None,
) -> list[uuid_module.UUID]:
    """Close gaps and duplicates left by a delete or shift, keeping the current order."""
    ordered = sibling_ids(db, model, scope, order_by)
    renumber(db, model, ordered)
    return ordered


def apply_permutation(
    db: Session,
    model: type,
    scope: Scope,
    ordered_ids: Sequence[Any],
) -> list[uuid_module.UUID]:
    """
    Renumber siblings to match a caller-supplied full ordering.

    The supplied ids must be exactly the current sibling id set: no duplicates,
    none missing, none foreign. On mismatch nothing is written.

    Raises:
        InvalidReorderSetError: If the supplied ids are not a permutation of the siblings
    """
    current = sibling_ids(db, model, scope)
    current_set = set(current)

    supplied: list[uuid_module.UUID] = []
    unexpected: list[str] = []
    for raw in ordered_ids:
        parsed = as_uuid(raw)
        if parsed is None or parsed not in current_set:
            unexpected.append(str(raw))
        else:
            supplied.append(parsed)

    duplicates = sorted({str(sid) for sid in supplied if supplied.count(sid) > 1})
    missing = sorted(str(sid) for sid in current_set.difference(supplied))

    if unexpected or missing or duplicates:
        message = "Supplied order does not match the current siblings"
        if duplicates:
            message += f"; duplicated: {', '.join(duplicates)}"
        raise InvalidReorderSetError(message, missing=missing, unexpected=unexpected)

    renumber(db, model, supplied)
    return supplied


def move(
    db: Session,
    model: type,
    scope: Scope,
    item_id: uuid_module.UUID,
    new_rank: int,
) -> list[uuid_module.UUID]:
    """Move one sibling to ``new_rank`` and renumber the rest around it."""
    ordered = sibling_ids(db, model, scope)
    if item_id not in ordered:
        raise InvalidArgumentError(f"'{item_id}' is not a member of this group")
    if new_rank < 0 or new_rank >= len(ordered):
        raise InvalidArgumentError(
            f"Rank {new_rank} is out of range (0..{len(ordered) - 1})"
        )
    ordered.remove(item_id)
    ordered.insert(new_rank, item_id)
    renumber(db, model, ordered)
    return ordered


__all__ = ["apply_permutation", "as_uuid", "compact", "move", "renumber", "shift_up", "sibling_ids"]
