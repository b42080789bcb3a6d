"""create_rundown_tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-09-01 00:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "rundowns",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("target_duration", sa.Integer(), nullable=True, comment="Target total duration in seconds"),
        sa.Column("share_with_class", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.Column("class_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rundowns")),
        sa.CheckConstraint(
            "status IN ('draft', 'in_progress', 'archived')", name=op.f("ck_rundowns_status_valid")
        ),
        sa.CheckConstraint(
            "NOT share_with_class OR class_id IS NOT NULL", name=op.f("ck_rundowns_shared_requires_class")
        ),
        sa.CheckConstraint(
            "target_duration IS NULL OR target_duration >= 0",
            name=op.f("ck_rundowns_target_duration_non_negative"),
        ),
    )
    op.create_index("ix_rundowns_created_by", "rundowns", ["created_by"])
    op.create_index("ix_rundowns_class_id", "rundowns", ["class_id"])

    op.create_table(
        "rundown_segments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("rundown_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("type", sa.String(length=50), nullable=False, server_default="segment"),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="Draft"),
        sa.Column("content", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column(
            "boundary",
            sa.String(length=10),
            nullable=True,
            comment="leading/trailing for the two pinned segments, NULL otherwise",
        ),
        sa.Column("expanded", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rundown_segments")),
        sa.ForeignKeyConstraint(
            ["rundown_id"],
            ["rundowns.id"],
            name=op.f("fk_rundown_segments_rundown_id_rundowns"),
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("order_index >= 0", name=op.f("ck_rundown_segments_rank_non_negative")),
        sa.CheckConstraint("duration >= 0", name=op.f("ck_rundown_segments_duration_non_negative")),
        sa.CheckConstraint(
            "boundary IS NULL OR boundary IN ('leading', 'trailing')",
            name=op.f("ck_rundown_segments_boundary_valid"),
        ),
        sa.UniqueConstraint("rundown_id", "boundary", name="uq_rundown_segments_rundown_boundary"),
    )
    op.create_index("ix_rundown_segments_rundown_rank", "rundown_segments", ["rundown_id", "order_index"])

    op.create_table(
        "rundown_talent",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("rundown_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("role", sa.String(length=10), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rundown_talent")),
        sa.ForeignKeyConstraint(
            ["rundown_id"],
            ["rundowns.id"],
            name=op.f("fk_rundown_talent_rundown_id_rundowns"),
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("role IN ('host', 'guest')", name=op.f("ck_rundown_talent_role_valid")),
        sa.CheckConstraint("order_index >= 0", name=op.f("ck_rundown_talent_rank_non_negative")),
    )
    op.create_index(
        "ix_rundown_talent_rundown_role_rank", "rundown_talent", ["rundown_id", "role", "order_index"]
    )
    # Case-insensitive name uniqueness per rundown
    op.create_index(
        "uq_rundown_talent_rundown_lower_name",
        "rundown_talent",
        ["rundown_id", sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "rundown_stories",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("rundown_id", sa.Uuid(), nullable=False),
        sa.Column("segment_id", sa.Uuid(), nullable=True),
        sa.Column("source_story_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("questions", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("interviewees", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("attached_by", sa.String(length=64), nullable=False),
        sa.Column("attached_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rundown_stories")),
        sa.ForeignKeyConstraint(
            ["rundown_id"],
            ["rundowns.id"],
            name=op.f("fk_rundown_stories_rundown_id_rundowns"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["segment_id"],
            ["rundown_segments.id"],
            name=op.f("fk_rundown_stories_segment_id_rundown_segments"),
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint(
            "rundown_id", "source_story_id", name="uq_rundown_stories_rundown_source_story"
        ),
    )
    op.create_index("ix_rundown_stories_segment_id", "rundown_stories", ["segment_id"])


def downgrade() -> None:
    op.drop_index("ix_rundown_stories_segment_id", table_name="rundown_stories")
    op.drop_table("rundown_stories")
    op.drop_index("uq_rundown_talent_rundown_lower_name", table_name="rundown_talent")
    op.drop_index("ix_rundown_talent_rundown_role_rank", table_name="rundown_talent")
    op.drop_table("rundown_talent")
    op.drop_index("ix_rundown_segments_rundown_rank", table_name="rundown_segments")
    op.drop_table("rundown_segments")
    op.drop_index("ix_rundowns_class_id", table_name="rundowns")
    op.drop_index("ix_rundowns_created_by", table_name="rundowns")
    op.drop_table("rundowns")
