"""
Domain entities for VidPOD.

A Rundown exclusively owns its segments, talent and story links. Ranks are
zero-based and contiguous among siblings; the ordering rules themselves live in
``vidpod.core.ordering`` and the use cases, not in the models.
"""

from __future__ import annotations

import uuid as uuid_module
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ..infra.db import Base
from ..shared.types import Boundary, RundownStatus

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = sa.JSON().with_variant(PG_JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Rundown(Base):
    """A show-planning document."""

    __tablename__ = "rundowns"

    id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid_module.uuid4
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    target_duration: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Target total duration in seconds"
    )
    share_with_class: Mapped[bool] = mapped_column(
        Boolean, server_default=sa.text("false"), default=False, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RundownStatus.DRAFT.value,
        server_default=RundownStatus.DRAFT.value,
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    class_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(), nullable=False,
    )
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    segments: Mapped[list[RundownSegment]] = relationship(
        "RundownSegment",
        back_populates="rundown",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RundownSegment.rank",
    )
    talent: Mapped[list[RundownTalent]] = relationship(
        "RundownTalent",
        back_populates="rundown",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[RundownTalent.role, RundownTalent.rank]",
    )
    stories: Mapped[list[RundownStory]] = relationship(
        "RundownStory",
        back_populates="rundown",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RundownStory.attached_at",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'in_progress', 'archived')", name="status_valid"
        ),
        CheckConstraint(
            "NOT share_with_class OR class_id IS NOT NULL", name="shared_requires_class"
        ),
        CheckConstraint(
            "target_duration IS NULL OR target_duration >= 0", name="target_duration_non_negative"
        ),
        Index("ix_rundowns_created_by", "created_by"),
        Index("ix_rundowns_class_id", "class_id"),
    )

    def __repr__(self) -> str:
        return f"<Rundown(id={self.id}, title={self.title}, status={self.status})>"


class RundownSegment(Base):
    """An ordered unit of show content belonging to one rundown."""

    __tablename__ = "rundown_segments"

    id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid_module.uuid4
    )
    rundown_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), ForeignKey("rundowns.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60, server_default="60")
    segment_type: Mapped[str] = mapped_column(
        "type", String(50), nullable=False, default="segment", server_default="segment"
    )
    rank: Mapped[int] = mapped_column("order_index", Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="Draft", server_default="Draft"
    )
    content: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    boundary: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
        comment="leading/trailing for the two pinned segments, NULL otherwise",
    )
    expanded: Mapped[bool] = mapped_column(
        Boolean, server_default=sa.text("false"), default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(), nullable=False,
    )

    rundown: Mapped[Rundown] = relationship("Rundown", back_populates="segments")

    __table_args__ = (
        CheckConstraint("order_index >= 0", name="rank_non_negative"),
        CheckConstraint("duration >= 0", name="duration_non_negative"),
        CheckConstraint(
            "boundary IS NULL OR boundary IN ('leading', 'trailing')", name="boundary_valid"
        ),
        # At most one leading and one trailing pinned segment per rundown
        UniqueConstraint("rundown_id", "boundary", name="uq_rundown_segments_rundown_boundary"),
        Index("ix_rundown_segments_rundown_rank", "rundown_id", "order_index"),
    )

    @property
    def pinned(self) -> bool:
        return self.boundary is not None

    @property
    def is_trailing(self) -> bool:
        return self.boundary == Boundary.TRAILING.value

    def __repr__(self) -> str:
        return f"<RundownSegment(id={self.id}, title={self.title}, rank={self.rank}, boundary={self.boundary})>"


class RundownTalent(Base):
    """A named host or guest assigned to a rundown."""

    __tablename__ = "rundown_talent"

    id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid_module.uuid4
    )
    rundown_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), ForeignKey("rundowns.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(10), nullable=False)
    rank: Mapped[int] = mapped_column("order_index", Integer, nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    rundown: Mapped[Rundown] = relationship("Rundown", back_populates="talent")

    __table_args__ = (
        CheckConstraint("role IN ('host', 'guest')", name="role_valid"),
        CheckConstraint("order_index >= 0", name="rank_non_negative"),
        Index("ix_rundown_talent_rundown_role_rank", "rundown_id", "role", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<RundownTalent(id={self.id}, name={self.name}, role={self.role}, rank={self.rank})>"


# Case-insensitive name uniqueness per rundown
Index(
    "uq_rundown_talent_rundown_lower_name",
    RundownTalent.rundown_id,
    func.lower(RundownTalent.name),
    unique=True,
)


class RundownStory(Base):
    """
    Point-in-time snapshot of an external story attached to a rundown.

    The copied fields are authoritative once attached: later edits, unapproval or
    deletion of the source story do not change the link.
    """

    __tablename__ = "rundown_stories"

    id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid_module.uuid4
    )
    rundown_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(), ForeignKey("rundowns.id", ondelete="CASCADE"), nullable=False
    )
    segment_id: Mapped[uuid_module.UUID | None] = mapped_column(
        sa.Uuid(), ForeignKey("rundown_segments.id", ondelete="SET NULL"), nullable=True
    )
    source_story_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    questions: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    interviewees: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    attached_by: Mapped[str] = mapped_column(String(64), nullable=False)
    attached_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    rundown: Mapped[Rundown] = relationship("Rundown", back_populates="stories")
    segment: Mapped[RundownSegment | None] = relationship("RundownSegment")

    __table_args__ = (
        UniqueConstraint(
            "rundown_id", "source_story_id", name="uq_rundown_stories_rundown_source_story"
        ),
        Index("ix_rundown_stories_segment_id", "segment_id"),
    )

    def __repr__(self) -> str:
        return f"<RundownStory(id={self.id}, source_story_id={self.source_story_id}, title={self.title})>"
