"""
Shared types and enums for VidPOD.

This module contains common types and enums that are used across
the domain, API, CLI, and other layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Roles issued by the identity provider."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    USER = "user"  # authenticated, no specific role


class RundownStatus(str, Enum):
    """Lifecycle of a rundown. Archiving is the only delete path for non-admins."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    ARCHIVED = "archived"


class TalentRole(str, Enum):
    """Role groups within a rundown's talent roster."""

    HOST = "host"
    GUEST = "guest"


class Boundary(str, Enum):
    """Position of a pinned segment."""

    LEADING = "leading"
    TRAILING = "trailing"


class SegmentType(str, Enum):
    """Well-known segment type tags. Other tags are accepted as free text."""

    INTRO = "intro"
    SEGMENT = "segment"
    OUTRO = "outro"


DEFAULT_SEGMENT_STATUS = "Draft"
DEFAULT_SEGMENT_DURATION = 60


@dataclass(frozen=True)
class Actor:
    """The authenticated caller performing an operation."""

    actor_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


# Opaque structured payload carried by a segment
SegmentContent = dict[str, Any]
