"""
YAML-backed directory for local runs and demos.

One file provides the three collaborators the engine consumes: bearer tokens
(identity), class ownership and enrolment (roster) and story ideas (story
repository). Layout::

    users:
      - id: t-100
        role: teacher
        token: teacher-token
    classes:
      - id: class-7
        teacher_id: t-100
        students: [s-200, s-201]
    stories:
      - id: 1
        title: Campus recycling
        description: ...
        questions: [...]
        interviewees: [...]
        tags: [environment]
        approved: true
        owner_id: s-200
        created_at: 2024-09-01
"""

from __future__ import annotations

import hmac
import logging
from pathlib import Path
from typing import Any

import yaml

from ..domain.interfaces import ClassRoster, IdentityProvider, StoryRecord, StoryRepository
from ..infra.exceptions import NotFoundError, UnauthenticatedError
from ..shared.types import Actor, Role

_logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class YamlDirectory(IdentityProvider, ClassRoster, StoryRepository):
    """Identity, class roster and story lookups read from a single YAML file."""

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._tokens: dict[str, Actor] = {}
        self._teachers: dict[str, str] = {}
        self._students: dict[str, set[str]] = {}
        self._stories: dict[int, StoryRecord] = {}
        self._story_dates: dict[int, str] = {}
        self._loaded = False

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> YamlDirectory:
        """Build a directory from already-parsed data (used by tests)."""
        directory = cls(Path("<memory>"))
        directory._apply(data)
        directory._loaded = True
        return directory

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._load()

    def _load(self) -> None:
        if not self._path.is_file():
            raise FileNotFoundError(f"Directory file not found: {self._path}")
        with open(self._path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        self._apply(data)
        _logger.info(
            "Loaded directory from %s: %d users, %d classes, %d stories",
            self._path,
            len(self._tokens),
            len(self._teachers),
            len(self._stories),
        )
        self._loaded = True

    def _apply(self, data: dict[str, Any]) -> None:
        self._tokens.clear()
        self._teachers.clear()
        self._students.clear()
        self._stories.clear()
        self._story_dates.clear()

        for user in data.get("users") or []:
            actor_id = str(user["id"])
            try:
                role = Role(str(user.get("role", Role.USER.value)).lower())
            except ValueError:
                raise ValueError(f"Unknown role '{user.get('role')}' for user {actor_id}")
            token = user.get("token")
            if token:
                self._tokens[str(token)] = Actor(actor_id=actor_id, role=role)

        for entry in data.get("classes") or []:
            class_id = str(entry["id"])
            self._teachers[class_id] = str(entry.get("teacher_id", ""))
            self._students[class_id] = set(_as_list(entry.get("students")))

        for entry in data.get("stories") or []:
            story_id = int(entry["id"])
            self._stories[story_id] = StoryRecord(
                story_id=story_id,
                title=str(entry.get("title", "")),
                description=entry.get("description"),
                questions=_as_list(entry.get("questions")),
                interviewees=_as_list(entry.get("interviewees")),
                tags=_as_list(entry.get("tags")),
                approved=bool(entry.get("approved", False)),
                owner_id=str(entry.get("owner_id", "")),
            )
            self._story_dates[story_id] = str(entry.get("created_at", ""))

    def reload(self) -> None:
        """Force reload from disk."""
        self._loaded = False
        self._load()

    # IdentityProvider

    def authenticate(self, token: str) -> Actor:
        self._ensure_loaded()
        if not token:
            raise UnauthenticatedError("Missing bearer token")
        for known, actor in self._tokens.items():
            if hmac.compare_digest(known.encode(), token.encode()):
                return actor
        raise UnauthenticatedError("Invalid bearer token")

    # ClassRoster

    def is_teacher_of_class(self, actor_id: str, class_id: str) -> bool:
        self._ensure_loaded()
        return bool(actor_id) and self._teachers.get(class_id) == actor_id

    def is_student_enrolled(self, actor_id: str, class_id: str) -> bool:
        self._ensure_loaded()
        return actor_id in self._students.get(class_id, set())

    def taught_class_ids(self, actor_id: str) -> set[str]:
        self._ensure_loaded()
        return {cid for cid, teacher in self._teachers.items() if teacher == actor_id}

    def enrolled_class_ids(self, actor_id: str) -> set[str]:
        self._ensure_loaded()
        return {cid for cid, students in self._students.items() if actor_id in students}

    # StoryRepository

    def get_story(self, story_id: int) -> StoryRecord:
        self._ensure_loaded()
        story = self._stories.get(story_id)
        if story is None:
            raise NotFoundError(f"Story '{story_id}' not found")
        return story

    def search_stories(self, *, search: str | None = None, tag: str | None = None) -> list[StoryRecord]:
        self._ensure_loaded()
        needle = search.lower() if search else None
        matches = []
        for story in self._stories.values():
            if needle and needle not in story.title.lower() and needle not in (story.description or "").lower():
                continue
            if tag and tag not in story.tags:
                continue
            matches.append(story)
        # Newest first, ties broken by id descending
        matches.sort(key=lambda s: (self._story_dates.get(s.story_id, ""), s.story_id), reverse=True)
        return matches


__all__ = ["YamlDirectory"]
