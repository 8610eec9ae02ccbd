"""Mentoring relationship ORM model."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column, utcnow


class RelationshipType(str, enum.Enum):
    MENTOR = "mentor"
    COACH = "coach"
    MANAGER = "manager"
    PEER = "peer"


class RelationshipStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class MentoringRelationship(TimestampMixin, Base):
    """A standing mentor/mentee pairing inside one tenant.

    Relationships are never deleted; ending one sets ``status`` to ``ended``
    and stamps ``ended_at``.
    """

    __tablename__ = "mentoring_relationships"
    __table_args__ = (
        UniqueConstraint(
            "mentor_id", "mentee_id", "relationship_type", name="uq_mentoring_relationships_pair_type"
        ),
        Index("ix_mentoring_relationships_tenant_id", "tenant_id"),
        Index("ix_mentoring_relationships_mentor_id", "mentor_id"),
        Index("ix_mentoring_relationships_mentee_id", "mentee_id"),
    )

    id: Mapped[str] = id_column()
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    mentor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    mentee_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    relationship_type: Mapped[RelationshipType] = mapped_column(
        enum_type(RelationshipType, "mentoring_relationship_type"),
        nullable=False,
        default=RelationshipType.MENTOR,
    )
    status: Mapped[RelationshipStatus] = mapped_column(
        enum_type(RelationshipStatus, "mentoring_relationship_status"),
        nullable=False,
        default=RelationshipStatus.ACTIVE,
    )
    description: Mapped[str | None] = mapped_column(Text)
    goals: Mapped[str | None] = mapped_column(Text)
    meeting_preferences: Mapped[dict | None] = mapped_column(JSON)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    tenant = relationship("Tenant", back_populates="mentoring_relationships")
    mentor = relationship("User", foreign_keys=[mentor_id])
    mentee = relationship("User", foreign_keys=[mentee_id])
    sessions = relationship("MentoringSession", back_populates="mentoring_relationship")

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.mentor_id, self.mentee_id)


__all__ = ["MentoringRelationship", "RelationshipStatus", "RelationshipType"]
