"""
Access evaluator for rundowns.

One rule table, evaluated top-down, first match wins:

1. admin                                           -> view + edit
2. creator of the rundown                          -> view + edit
3. teacher who owns the rundown's class            -> view + edit
4. student enrolled in the class, rundown shared   -> view only
5. anyone else                                     -> nothing

Existence is not decided here; callers resolve the rundown first and raise
NotFoundError before consulting the evaluator.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol

from ..domain.interfaces import ClassRoster
from ..infra.exceptions import AccessDeniedError
from ..shared.types import Actor, Role


class AccessLevel(IntEnum):
    NONE = 0
    VIEW = 1
    EDIT = 2


class RundownAccessInfo(Protocol):
    """The ownership metadata the rule table needs."""

    created_by: str
    class_id: str | None
    share_with_class: bool


class AccessEvaluator:
    """Decides view/edit rights on a rundown for an actor."""

    def __init__(self, roster: ClassRoster):
        self._roster = roster

    @property
    def roster(self) -> ClassRoster:
        return self._roster

    def level(self, rundown: RundownAccessInfo, actor: Actor) -> AccessLevel:
        if actor.role is Role.ADMIN:
            return AccessLevel.EDIT
        if rundown.created_by == actor.actor_id:
            return AccessLevel.EDIT
        if rundown.class_id is None:
            return AccessLevel.NONE
        if actor.role is Role.TEACHER and self._roster.is_teacher_of_class(
            actor.actor_id, rundown.class_id
        ):
            return AccessLevel.EDIT
        if (
            actor.role is Role.STUDENT
            and rundown.share_with_class
            and self._roster.is_student_enrolled(actor.actor_id, rundown.class_id)
        ):
            return AccessLevel.VIEW
        return AccessLevel.NONE

    def can_view(self, rundown: RundownAccessInfo, actor: Actor) -> bool:
        return self.level(rundown, actor) >= AccessLevel.VIEW

    def can_edit(self, rundown: RundownAccessInfo, actor: Actor) -> bool:
        return self.level(rundown, actor) >= AccessLevel.EDIT

    def require(self, rundown: RundownAccessInfo, actor: Actor, *, edit: bool) -> None:
        """
        Raise unless the actor holds the requested right.

        Raises:
            AccessDeniedError: If the actor may not view (or edit) the rundown
        """
        allowed = self.can_edit(rundown, actor) if edit else self.can_view(rundown, actor)
        if not allowed:
            action = "edit" if edit else "view"
            raise AccessDeniedError(f"Access denied: cannot {action} this rundown")

    def may_assign_class(self, actor: Actor, class_id: str) -> bool:
        """Whether the actor may place a rundown in a class (on create or update)."""
        if actor.role is Role.ADMIN:
            return True
        if actor.role is Role.TEACHER:
            return self._roster.is_teacher_of_class(actor.actor_id, class_id)
        if actor.role is Role.STUDENT:
            return self._roster.is_student_enrolled(actor.actor_id, class_id)
        return False
