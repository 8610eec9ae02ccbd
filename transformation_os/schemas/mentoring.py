"""Schemas for mentoring relationships, sessions, notes, prep and action items."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import Field

from transformation_os.models import (
    ActionItemPriority,
    ActionItemStatus,
    NoteVisibility,
    RelationshipStatus,
    RelationshipType,
    SessionStatus,
    SessionType,
)
from transformation_os.schemas.common import CamelModel, UserSummary


class RelationshipCreate(CamelModel):
    """Payload for pairing a mentor with a mentee."""

    mentor_id: str = Field(..., description="User acting as mentor")
    mentee_id: str = Field(..., description="User being mentored")
    relationship_type: RelationshipType = Field(default=RelationshipType.MENTOR)
    description: str | None = None
    goals: str | None = None
    meeting_preferences: dict[str, Any] | None = Field(
        default=None, description="Free-form scheduling preferences"
    )


class RelationshipRead(CamelModel):
    id: str
    tenant_id: str
    mentor_id: str
    mentee_id: str
    relationship_type: RelationshipType
    status: RelationshipStatus
    description: str | None
    goals: str | None
    meeting_preferences: dict[str, Any] | None
    started_at: datetime
    ended_at: datetime | None
    mentor: UserSummary | None = None
    mentee: UserSummary | None = None


class SessionCreate(CamelModel):
    """Payload for scheduling a session under a relationship."""

    relationship_id: str
    title: str = Field(..., max_length=255)
    session_type: SessionType = Field(default=SessionType.MENTORING)
    scheduled_date: date
    scheduled_time: str | None = Field(default=None, max_length=10, description="Local time, e.g. 14:30")
    duration: int = Field(default=60, gt=0, description="Length in minutes")
    timezone: str | None = Field(default=None, max_length=50)
    location: str | None = Field(default=None, max_length=255)
    meeting_link: str | None = None
    agenda: str | None = None


class SessionUpdate(CamelModel):
    """Partial update of a session. Status changes only move forward."""

    title: str | None = Field(default=None, max_length=255)
    session_type: SessionType | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = Field(default=None, max_length=10)
    duration: int | None = Field(default=None, gt=0)
    timezone: str | None = Field(default=None, max_length=50)
    location: str | None = Field(default=None, max_length=255)
    meeting_link: str | None = None
    agenda: str | None = None
    summary: str | None = None
    status: SessionStatus | None = None


class SessionRead(CamelModel):
    id: str
    relationship_id: str
    title: str | None
    session_type: SessionType
    scheduled_date: date
    scheduled_time: str | None
    duration: int
    timezone: str | None
    location: str | None
    meeting_link: str | None
    status: SessionStatus
    agenda: str | None
    summary: str | None
    started_at: datetime | None
    ended_at: datetime | None


class NoteCreate(CamelModel):
    content: str = Field(..., min_length=1)
    visibility: NoteVisibility = Field(default=NoteVisibility.PRIVATE)


class NoteRead(CamelModel):
    id: str
    session_id: str
    author_id: str
    content: str
    visibility: NoteVisibility
    created_at: datetime


class PrepCreate(CamelModel):
    """The mentee's reflection ahead of a session."""

    wins: str | None = None
    challenges: str | None = None
    topics_to_discuss: list[str] = Field(default_factory=list)
    questions_for_mentor: str | None = None


class PrepUpdate(CamelModel):
    wins: str | None = None
    challenges: str | None = None
    topics_to_discuss: list[str] | None = None
    questions_for_mentor: str | None = None


class PrepRead(CamelModel):
    id: str
    session_id: str
    user_id: str
    wins: str | None
    challenges: str | None
    topics_to_discuss: list[str]
    questions_for_mentor: str | None
    submitted_at: datetime | None


class ActionItemCreate(CamelModel):
    relationship_id: str
    session_id: str | None = None
    owner_id: str | None = Field(default=None, description="Defaults to the caller")
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    priority: ActionItemPriority = Field(default=ActionItemPriority.MEDIUM)
    due_date: date | None = None


class ActionItemUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: ActionItemPriority | None = None
    status: ActionItemStatus | None = None
    due_date: date | None = None
    completed_at: datetime | None = Field(
        default=None, description="Stamped automatically when completing without one"
    )


class ActionItemRead(CamelModel):
    id: str
    relationship_id: str
    session_id: str | None
    owner_id: str
    title: str
    description: str | None
    priority: ActionItemPriority
    status: ActionItemStatus
    due_date: date | None
    completed_at: datetime | None


class MentoringStatsRead(CamelModel):
    total_relationships: int
    active_relationships: int
    upcoming_sessions: int
    completed_sessions: int
    open_action_items: int
    overdue_action_items: int


__all__ = [
    "ActionItemCreate",
    "ActionItemRead",
    "ActionItemUpdate",
    "MentoringStatsRead",
    "NoteCreate",
    "NoteRead",
    "PrepCreate",
    "PrepRead",
    "PrepUpdate",
    "RelationshipCreate",
    "RelationshipRead",
    "SessionCreate",
    "SessionRead",
    "SessionUpdate",
]
