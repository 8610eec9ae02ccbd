"""Session prep ORM model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, id_column


class SessionPrep(TimestampMixin, Base):
    """The mentee's reflection ahead of a session. At most one per session."""

    __tablename__ = "mentoring_session_preps"
    __table_args__ = (
        UniqueConstraint("session_id", name="uq_mentoring_session_preps_session"),
    )

    id: Mapped[str] = id_column()
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("mentoring_sessions.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    wins: Mapped[str | None] = mapped_column(Text)
    challenges: Mapped[str | None] = mapped_column(Text)
    topics_to_discuss: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    questions_for_mentor: Mapped[str | None] = mapped_column(Text)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    session = relationship("MentoringSession", back_populates="prep")


__all__ = ["SessionPrep"]
