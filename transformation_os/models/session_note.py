"""Session note ORM model."""
from __future__ import annotations

import enum

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class NoteVisibility(str, enum.Enum):
    PRIVATE = "private"
    SHARED = "shared"


class SessionNote(TimestampMixin, Base):
    """A note on a session; private notes are only ever shown to their author."""

    __tablename__ = "mentoring_session_notes"
    __table_args__ = (
        Index("ix_mentoring_session_notes_session_id", "session_id"),
    )

    id: Mapped[str] = id_column()
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("mentoring_sessions.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[NoteVisibility] = mapped_column(
        enum_type(NoteVisibility, "note_visibility"), nullable=False, default=NoteVisibility.PRIVATE
    )

    session = relationship("MentoringSession", back_populates="notes")


__all__ = ["NoteVisibility", "SessionNote"]
