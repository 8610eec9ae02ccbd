"""Initial schema: agencies, tenants, users, programs and mentoring."""
from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from alembic import op

revision = "20241001_01"
down_revision = None
branch_labels = None
depends_on: Iterable[str] | None = None

_ENUMS = {
    "agency_status": ("active", "suspended"),
    "tenant_status": ("active", "suspended", "inactive"),
    "system_role": ("agency_owner", "agency_admin", "tenant_admin", "facilitator", "mentor", "learner"),
    "user_status": ("active", "invited", "disabled"),
    "program_status": ("draft", "active", "archived"),
    "enrollment_role": ("learner", "mentor", "facilitator"),
    "enrollment_status": ("active", "completed", "dropped"),
    "mentoring_relationship_type": ("mentor", "coach", "manager", "peer"),
    "mentoring_relationship_status": ("active", "paused", "ended"),
    "mentoring_session_type": ("mentoring", "one_on_one", "check_in", "review", "planning"),
    "mentoring_session_status": (
        "scheduled",
        "prep_in_progress",
        "ready",
        "in_progress",
        "completed",
        "cancelled",
        "no_show",
    ),
    "note_visibility": ("private", "shared"),
    "action_item_priority": ("low", "medium", "high", "urgent"),
    "action_item_status": ("pending", "in_progress", "completed", "cancelled"),
}


def _enum(name: str) -> sa.Enum:
    return sa.Enum(*_ENUMS[name], name=name)


def _drop_enum(name: str) -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute(sa.text(f"DROP TYPE IF EXISTS {name}"))


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _fk(column: str, target: str, *, ondelete: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        column, sa.String(length=36), sa.ForeignKey(f"{target}.id", ondelete=ondelete), nullable=nullable
    )


def upgrade() -> None:  # noqa: D401
    """Create tables, constraints and indexes."""

    op.create_table(
        "agencies",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False, unique=True),
        sa.Column("status", _enum("agency_status"), nullable=False, server_default="active"),
        *_timestamps(),
    )

    op.create_table(
        "tenants",
        _id(),
        _fk("agency_id", "agencies", ondelete="RESTRICT", nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("status", _enum("tenant_status"), nullable=False, server_default="active"),
        *_timestamps(),
        sa.UniqueConstraint("agency_id", "slug", name="uq_tenants_agency_slug"),
    )
    op.create_index("ix_tenants_agency_id", "tenants", ["agency_id"])

    op.create_table(
        "users",
        _id(),
        _fk("tenant_id", "tenants", ondelete="RESTRICT", nullable=True),
        _fk("agency_id", "agencies", ondelete="RESTRICT", nullable=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=200)),
        sa.Column("role", _enum("system_role"), nullable=False),
        sa.Column("status", _enum("user_status"), nullable=False, server_default="active"),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])
    op.create_index("ix_users_agency_id", "users", ["agency_id"])

    op.create_table(
        "programs",
        _id(),
        _fk("agency_id", "agencies", ondelete="CASCADE"),
        _fk("tenant_id", "tenants", ondelete="SET NULL", nullable=True),
        sa.Column("allowed_tenant_ids", sa.JSON(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", _enum("program_status"), nullable=False, server_default="draft"),
        *_timestamps(),
    )
    op.create_index("ix_programs_tenant_id", "programs", ["tenant_id"])
    op.create_index("ix_programs_agency_id", "programs", ["agency_id"])

    op.create_table(
        "enrollments",
        _id(),
        _fk("program_id", "programs", ondelete="CASCADE"),
        _fk("user_id", "users", ondelete="CASCADE"),
        _fk("tenant_id", "tenants", ondelete="SET NULL", nullable=True),
        sa.Column("role", _enum("enrollment_role"), nullable=False, server_default="learner"),
        sa.Column("status", _enum("enrollment_status"), nullable=False, server_default="active"),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.UniqueConstraint("program_id", "user_id", name="uq_enrollments_program_user"),
    )
    op.create_index("ix_enrollments_tenant_id", "enrollments", ["tenant_id"])
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])

    op.create_table(
        "mentoring_relationships",
        _id(),
        _fk("tenant_id", "tenants", ondelete="CASCADE"),
        _fk("mentor_id", "users", ondelete="CASCADE"),
        _fk("mentee_id", "users", ondelete="CASCADE"),
        sa.Column(
            "relationship_type", _enum("mentoring_relationship_type"), nullable=False, server_default="mentor"
        ),
        sa.Column("status", _enum("mentoring_relationship_status"), nullable=False, server_default="active"),
        sa.Column("description", sa.Text()),
        sa.Column("goals", sa.Text()),
        sa.Column("meeting_preferences", sa.JSON()),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("ended_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.UniqueConstraint(
            "mentor_id", "mentee_id", "relationship_type", name="uq_mentoring_relationships_pair_type"
        ),
    )
    op.create_index("ix_mentoring_relationships_tenant_id", "mentoring_relationships", ["tenant_id"])
    op.create_index("ix_mentoring_relationships_mentor_id", "mentoring_relationships", ["mentor_id"])
    op.create_index("ix_mentoring_relationships_mentee_id", "mentoring_relationships", ["mentee_id"])

    op.create_table(
        "mentoring_sessions",
        _id(),
        _fk("relationship_id", "mentoring_relationships", ondelete="CASCADE"),
        sa.Column("title", sa.String(length=255)),
        sa.Column("session_type", _enum("mentoring_session_type"), nullable=False, server_default="mentoring"),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.String(length=10)),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("timezone", sa.String(length=50)),
        sa.Column("location", sa.String(length=255)),
        sa.Column("meeting_link", sa.Text()),
        sa.Column("status", _enum("mentoring_session_status"), nullable=False, server_default="scheduled"),
        sa.Column("agenda", sa.Text()),
        sa.Column("summary", sa.Text()),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("ended_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_mentoring_sessions_relationship_id", "mentoring_sessions", ["relationship_id"])
    op.create_index("ix_mentoring_sessions_scheduled_date", "mentoring_sessions", ["scheduled_date"])

    op.create_table(
        "mentoring_session_preps",
        _id(),
        _fk("session_id", "mentoring_sessions", ondelete="CASCADE"),
        _fk("user_id", "users", ondelete="CASCADE"),
        sa.Column("wins", sa.Text()),
        sa.Column("challenges", sa.Text()),
        sa.Column("topics_to_discuss", sa.JSON(), nullable=False),
        sa.Column("questions_for_mentor", sa.Text()),
        sa.Column("submitted_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.UniqueConstraint("session_id", name="uq_mentoring_session_preps_session"),
    )

    op.create_table(
        "mentoring_session_notes",
        _id(),
        _fk("session_id", "mentoring_sessions", ondelete="CASCADE"),
        _fk("author_id", "users", ondelete="CASCADE"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("visibility", _enum("note_visibility"), nullable=False, server_default="private"),
        *_timestamps(),
    )
    op.create_index("ix_mentoring_session_notes_session_id", "mentoring_session_notes", ["session_id"])

    op.create_table(
        "mentoring_action_items",
        _id(),
        _fk("relationship_id", "mentoring_relationships", ondelete="CASCADE"),
        _fk("session_id", "mentoring_sessions", ondelete="SET NULL", nullable=True),
        _fk("owner_id", "users", ondelete="CASCADE"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("priority", _enum("action_item_priority"), nullable=False, server_default="medium"),
        sa.Column("status", _enum("action_item_status"), nullable=False, server_default="pending"),
        sa.Column("due_date", sa.Date()),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_mentoring_action_items_relationship_id", "mentoring_action_items", ["relationship_id"])
    op.create_index("ix_mentoring_action_items_owner_id", "mentoring_action_items", ["owner_id"])


def downgrade() -> None:  # noqa: D401
    """Drop every table in reverse dependency order."""

    op.drop_index("ix_mentoring_action_items_owner_id", table_name="mentoring_action_items")
    op.drop_index("ix_mentoring_action_items_relationship_id", table_name="mentoring_action_items")
    op.drop_table("mentoring_action_items")

    op.drop_index("ix_mentoring_session_notes_session_id", table_name="mentoring_session_notes")
    op.drop_table("mentoring_session_notes")
    op.drop_table("mentoring_session_preps")

    op.drop_index("ix_mentoring_sessions_scheduled_date", table_name="mentoring_sessions")
    op.drop_index("ix_mentoring_sessions_relationship_id", table_name="mentoring_sessions")
    op.drop_table("mentoring_sessions")

    op.drop_index("ix_mentoring_relationships_mentee_id", table_name="mentoring_relationships")
    op.drop_index("ix_mentoring_relationships_mentor_id", table_name="mentoring_relationships")
    op.drop_index("ix_mentoring_relationships_tenant_id", table_name="mentoring_relationships")
    op.drop_table("mentoring_relationships")

    op.drop_index("ix_enrollments_user_id", table_name="enrollments")
    op.drop_index("ix_enrollments_tenant_id", table_name="enrollments")
    op.drop_table("enrollments")

    op.drop_index("ix_programs_agency_id", table_name="programs")
    op.drop_index("ix_programs_tenant_id", table_name="programs")
    op.drop_table("programs")

    op.drop_index("ix_users_agency_id", table_name="users")
    op.drop_index("ix_users_tenant_id", table_name="users")
    op.drop_table("users")

    op.drop_index("ix_tenants_agency_id", table_name="tenants")
    op.drop_table("tenants")
    op.drop_table("agencies")

    for enum_name in reversed(list(_ENUMS)):
        _drop_enum(enum_name)
