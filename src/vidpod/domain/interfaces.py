"""Domain interfaces for the collaborators the rundown engine consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..shared.types import Actor


@dataclass(frozen=True)
class StoryRecord:
    """A story idea as returned by the story repository."""

    story_id: int
    title: str
    description: str | None
    questions: list[str]
    interviewees: list[str]
    tags: list[str]
    approved: bool
    owner_id: str
    extra: dict[str, Any] = field(default_factory=dict)

    def is_visible_to(self, actor: Actor) -> bool:
        """Approved stories are visible to everyone, unapproved ones only to their owner."""
        return self.approved or self.owner_id == actor.actor_id


class IdentityProvider(ABC):
    """Resolves a bearer credential to an actor."""

    @abstractmethod
    def authenticate(self, token: str) -> Actor:
        """
        Verify the credential and return the actor behind it.

        Raises:
            UnauthenticatedError: If the credential is unknown or malformed
        """
        raise NotImplementedError


class ClassRoster(ABC):
    """Answers class membership questions for the access evaluator."""

    @abstractmethod
    def is_teacher_of_class(self, actor_id: str, class_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_student_enrolled(self, actor_id: str, class_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def taught_class_ids(self, actor_id: str) -> set[str]:
        """All classes owned by a teacher; used to list visible rundowns in one query."""
        raise NotImplementedError

    @abstractmethod
    def enrolled_class_ids(self, actor_id: str) -> set[str]:
        """All classes a student is enrolled in."""
        raise NotImplementedError


class StoryRepository(ABC):
    """Read-only lookup into the story-idea repository."""

    @abstractmethod
    def get_story(self, story_id: int) -> StoryRecord:
        """
        Fetch one story.

        Raises:
            NotFoundError: If the story does not exist
        """
        raise NotImplementedError

    @abstractmethod
    def search_stories(self, *, search: str | None = None, tag: str | None = None) -> list[StoryRecord]:
        """
        Return stories matching the filters, newest first, regardless of visibility.

        Visibility is applied by the caller through StoryRecord.is_visible_to().
        """
        raise NotImplementedError


class DocumentRenderer(ABC):
    """Turns an exported rundown document into a byte stream."""

    media_type: str = "application/octet-stream"
    extension: str = "bin"

    @abstractmethod
    def render(self, document: dict[str, Any]) -> bytes:
        raise NotImplementedError
