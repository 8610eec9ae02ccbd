"""Mentoring session ORM model."""
from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class SessionType(str, enum.Enum):
    MENTORING = "mentoring"
    ONE_ON_ONE = "one_on_one"
    CHECK_IN = "check_in"
    REVIEW = "review"
    PLANNING = "planning"


class SessionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    PREP_IN_PROGRESS = "prep_in_progress"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class MentoringSession(TimestampMixin, Base):
    """A scheduled meeting under a mentoring relationship."""

    __tablename__ = "mentoring_sessions"
    __table_args__ = (
        Index("ix_mentoring_sessions_relationship_id", "relationship_id"),
        Index("ix_mentoring_sessions_scheduled_date", "scheduled_date"),
    )

    id: Mapped[str] = id_column()
    relationship_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("mentoring_relationships.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str | None] = mapped_column(String(255))
    session_type: Mapped[SessionType] = mapped_column(
        enum_type(SessionType, "mentoring_session_type"), nullable=False, default=SessionType.MENTORING
    )
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[str | None] = mapped_column(String(10))
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    timezone: Mapped[str | None] = mapped_column(String(50))
    location: Mapped[str | None] = mapped_column(String(255))
    meeting_link: Mapped[str | None] = mapped_column(Text)
    status: Mapped[SessionStatus] = mapped_column(
        enum_type(SessionStatus, "mentoring_session_status"), nullable=False, default=SessionStatus.SCHEDULED
    )
    agenda: Mapped[str | None] = mapped_column(Text)
    summary: Mapped[str | None] = mapped_column(Text)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    mentoring_relationship = relationship("MentoringRelationship", back_populates="sessions")
    prep = relationship("SessionPrep", back_populates="session", uselist=False)
    notes = relationship("SessionNote", back_populates="session")


__all__ = ["MentoringSession", "SessionStatus", "SessionType"]
