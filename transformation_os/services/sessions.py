"""Mentoring sessions and session notes."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from transformation_os.core.permissions import ADMIN_OVERRIDE_LEVEL
from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import (
    MentoringSession,
    NoteVisibility,
    SessionNote,
    SessionStatus,
    SessionType,
)
from transformation_os.models.base import utcnow
from transformation_os.obs import record_access_denial
from transformation_os.services.errors import BadRequestError, ForbiddenError, NotFoundError
from transformation_os.services.relationships import get_scoped_relationship
from transformation_os.services.scope import Scope

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED, SessionStatus.NO_SHOW})
# No prep may be written once a session is over, no-shows included.
CLOSED_STATUSES = TERMINAL_STATUSES

# Position in the normal forward flow. Cancellation sits outside it.
STATUS_RANK: dict[SessionStatus, int] = {
    SessionStatus.SCHEDULED: 0,
    SessionStatus.PREP_IN_PROGRESS: 1,
    SessionStatus.READY: 2,
    SessionStatus.IN_PROGRESS: 3,
    SessionStatus.COMPLETED: 4,
    SessionStatus.NO_SHOW: 4,
}

_EDITABLE_FIELDS = frozenset(
    {
        "title",
        "session_type",
        "scheduled_date",
        "scheduled_time",
        "duration",
        "timezone",
        "location",
        "meeting_link",
        "agenda",
        "summary",
    }
)

# NOT NULL columns; an explicit null leaves the stored value alone.
_REQUIRED_FIELDS = frozenset({"session_type", "scheduled_date", "duration"})


def validate_transition(current: SessionStatus, target: SessionStatus) -> None:
    """Raise :class:`BadRequestError` unless ``current`` may move to ``target``."""

    if current == target:
        return
    if current in TERMINAL_STATUSES:
        raise BadRequestError(f"Session is {current.value} and can no longer change status")
    if target == SessionStatus.CANCELLED:
        return
    if STATUS_RANK[target] <= STATUS_RANK[current]:
        raise BadRequestError(f"Cannot move a session from {current.value} back to {target.value}")


def list_sessions(
    session: Session, *, scope: Scope, relationship_id: str | None = None
) -> list[MentoringSession]:
    if scope.is_empty():
        return []
    statement = select(MentoringSession).where(scope.restrict(MentoringSession.relationship_id))
    if relationship_id is not None:
        # Narrows the scope; a foreign id simply matches nothing.
        statement = statement.where(MentoringSession.relationship_id == relationship_id)
    statement = statement.order_by(MentoringSession.scheduled_date.desc())
    return list(session.scalars(statement))


def get_scoped_session(session: Session, *, scope: Scope, session_id: str) -> MentoringSession:
    mentoring_session = session.get(MentoringSession, session_id)
    if mentoring_session is None:
        raise NotFoundError(f"Session '{session_id}' was not found")
    if not scope.includes(mentoring_session.mentoring_relationship):
        record_access_denial("session_out_of_scope")
        raise NotFoundError(f"Session '{session_id}' was not found")
    return mentoring_session


def create_session(
    session: Session,
    *,
    scope: Scope,
    relationship_id: str,
    scheduled_date: date,
    title: str | None = None,
    session_type: SessionType = SessionType.MENTORING,
    scheduled_time: str | None = None,
    duration: int = 60,
    timezone: str | None = None,
    location: str | None = None,
    meeting_link: str | None = None,
    agenda: str | None = None,
) -> MentoringSession:
    get_scoped_relationship(session, scope=scope, relationship_id=relationship_id)

    mentoring_session = MentoringSession(
        relationship_id=relationship_id,
        title=title,
        session_type=session_type,
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
        duration=duration,
        timezone=timezone,
        location=location,
        meeting_link=meeting_link,
        agenda=agenda,
        status=SessionStatus.SCHEDULED,
    )
    session.add(mentoring_session)
    session.commit()
    session.refresh(mentoring_session)
    return mentoring_session


def apply_status(mentoring_session: MentoringSession, target: SessionStatus, *, now: datetime | None = None) -> None:
    validate_transition(mentoring_session.status, target)
    if target == mentoring_session.status:
        return
    now = now or utcnow()
    if target == SessionStatus.IN_PROGRESS and mentoring_session.started_at is None:
        mentoring_session.started_at = now
    if target in (SessionStatus.COMPLETED, SessionStatus.NO_SHOW) and mentoring_session.ended_at is None:
        mentoring_session.ended_at = now
    mentoring_session.status = target


def update_session(
    session: Session,
    *,
    scope: Scope,
    session_id: str,
    changes: Mapping[str, Any],
) -> MentoringSession:
    mentoring_session = get_scoped_session(session, scope=scope, session_id=session_id)

    if changes.get("status") is not None:
        apply_status(mentoring_session, SessionStatus(changes["status"]))
    for field, value in changes.items():
        if field in _EDITABLE_FIELDS and not (value is None and field in _REQUIRED_FIELDS):
            setattr(mentoring_session, field, value)

    session.commit()
    session.refresh(mentoring_session)
    return mentoring_session


def cancel_session(session: Session, *, scope: Scope, session_id: str) -> MentoringSession:
    mentoring_session = get_scoped_session(session, scope=scope, session_id=session_id)
    apply_status(mentoring_session, SessionStatus.CANCELLED)
    session.commit()
    session.refresh(mentoring_session)
    logger.info("Cancelled mentoring session", extra={"session_id": session_id})
    return mentoring_session


def list_notes(
    session: Session, *, scope: Scope, user: AuthenticatedUser, session_id: str
) -> list[SessionNote]:
    """Notes on a session that ``user`` may read: shared ones and their own."""

    get_scoped_session(session, scope=scope, session_id=session_id)
    statement = (
        select(SessionNote)
        .where(
            SessionNote.session_id == session_id,
            or_(SessionNote.visibility == NoteVisibility.SHARED, SessionNote.author_id == user.id),
        )
        .order_by(SessionNote.created_at)
    )
    return list(session.scalars(statement))


def create_note(
    session: Session,
    *,
    scope: Scope,
    user: AuthenticatedUser,
    session_id: str,
    content: str,
    visibility: NoteVisibility = NoteVisibility.PRIVATE,
) -> SessionNote:
    mentoring_session = get_scoped_session(session, scope=scope, session_id=session_id)
    relationship = mentoring_session.mentoring_relationship
    if not relationship.is_participant(user.id) and user.role_level < ADMIN_OVERRIDE_LEVEL:
        record_access_denial("note_not_participant")
        raise ForbiddenError("Only participants can add notes to this session")

    note = SessionNote(session_id=session_id, author_id=user.id, content=content, visibility=visibility)
    session.add(note)
    session.commit()
    session.refresh(note)
    return note


__all__ = [
    "CLOSED_STATUSES",
    "STATUS_RANK",
    "TERMINAL_STATUSES",
    "apply_status",
    "cancel_session",
    "create_note",
    "create_session",
    "get_scoped_session",
    "list_notes",
    "list_sessions",
    "update_session",
    "validate_transition",
]
