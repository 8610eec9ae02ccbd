"""Mentoring action item ORM model."""
from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class ActionItemStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActionItemPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ActionItem(TimestampMixin, Base):
    """A follow-up task under a relationship, optionally tied to a session."""

    __tablename__ = "mentoring_action_items"
    __table_args__ = (
        Index("ix_mentoring_action_items_relationship_id", "relationship_id"),
        Index("ix_mentoring_action_items_owner_id", "owner_id"),
    )

    id: Mapped[str] = id_column()
    relationship_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("mentoring_relationships.id", ondelete="CASCADE"), nullable=False
    )
    session_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("mentoring_sessions.id", ondelete="SET NULL"), nullable=True
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    priority: Mapped[ActionItemPriority] = mapped_column(
        enum_type(ActionItemPriority, "action_item_priority"), nullable=False, default=ActionItemPriority.MEDIUM
    )
    status: Mapped[ActionItemStatus] = mapped_column(
        enum_type(ActionItemStatus, "action_item_status"), nullable=False, default=ActionItemStatus.PENDING
    )
    due_date: Mapped[date | None] = mapped_column(Date)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


__all__ = ["ActionItem", "ActionItemPriority", "ActionItemStatus"]
