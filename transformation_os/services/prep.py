"""Session prep: the mentee's reflection ahead of a session."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from transformation_os.core.permissions import ADMIN_OVERRIDE_LEVEL
from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import MentoringSession, SessionPrep, SessionStatus
from transformation_os.models.base import utcnow
from transformation_os.obs import access_span, record_access_denial
from transformation_os.services.errors import BadRequestError, DuplicatePrepError, ForbiddenError, NotFoundError
from transformation_os.services.scope import Scope
from transformation_os.services.sessions import CLOSED_STATUSES, STATUS_RANK, get_scoped_session

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({"wins", "challenges", "topics_to_discuss", "questions_for_mentor"})


def _find_prep(session: Session, *, session_id: str) -> SessionPrep | None:
    return session.scalars(select(SessionPrep).where(SessionPrep.session_id == session_id)).first()


def _writable_session(
    session: Session, *, scope: Scope, user: AuthenticatedUser, session_id: str
) -> MentoringSession:
    # Order matters: missing, then closed, then not the mentee.
    mentoring_session = get_scoped_session(session, scope=scope, session_id=session_id)
    if mentoring_session.status in CLOSED_STATUSES:
        raise BadRequestError(f"Cannot edit prep for a {mentoring_session.status.value} session")

    relationship = mentoring_session.mentoring_relationship
    if user.id != relationship.mentee_id and user.role_level < ADMIN_OVERRIDE_LEVEL:
        record_access_denial("prep_not_mentee")
        logger.info("Denied prep write", extra={"user_id": user.id, "session_id": session_id})
        raise ForbiddenError("Only the mentee can submit prep for this session")
    return mentoring_session


def get_prep(session: Session, *, scope: Scope, session_id: str) -> SessionPrep | None:
    get_scoped_session(session, scope=scope, session_id=session_id)
    return _find_prep(session, session_id=session_id)


def create_prep(
    session: Session,
    *,
    scope: Scope,
    user: AuthenticatedUser,
    session_id: str,
    wins: str | None = None,
    challenges: str | None = None,
    topics_to_discuss: list[str] | None = None,
    questions_for_mentor: str | None = None,
    now: datetime | None = None,
) -> SessionPrep:
    """Submit the prep for a session and mark the session ready.

    The unique constraint on ``session_id`` settles concurrent submissions:
    the losing insert surfaces as :class:`DuplicatePrepError`.
    """

    with access_span("mentoring.create_prep", **{"session.id": session_id, "user.id": user.id}):
        mentoring_session = _writable_session(session, scope=scope, user=user, session_id=session_id)
        if _find_prep(session, session_id=session_id) is not None:
            raise DuplicatePrepError("Prep already exists for this session; update it instead")

        now = now or utcnow()
        prep = SessionPrep(
            session_id=session_id,
            user_id=mentoring_session.mentoring_relationship.mentee_id,
            wins=wins,
            challenges=challenges,
            topics_to_discuss=list(topics_to_discuss or []),
            questions_for_mentor=questions_for_mentor,
            submitted_at=now,
        )
        session.add(prep)
        try:
            session.flush()
        except IntegrityError as exc:
            session.rollback()
            raise DuplicatePrepError("Prep already exists for this session; update it instead") from exc

        if STATUS_RANK.get(mentoring_session.status, 0) < STATUS_RANK[SessionStatus.READY]:
            mentoring_session.status = SessionStatus.READY

        session.commit()
        session.refresh(prep)
    logger.info("Submitted session prep", extra={"session_id": session_id})
    return prep


def update_prep(
    session: Session,
    *,
    scope: Scope,
    user: AuthenticatedUser,
    session_id: str,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> SessionPrep:
    _writable_session(session, scope=scope, user=user, session_id=session_id)
    prep = _find_prep(session, session_id=session_id)
    if prep is None:
        raise NotFoundError(f"No prep has been submitted for session '{session_id}'")

    for field, value in changes.items():
        if field in _EDITABLE_FIELDS:
            setattr(prep, field, list(value or []) if field == "topics_to_discuss" else value)
    prep.submitted_at = now or utcnow()

    session.commit()
    session.refresh(prep)
    return prep


__all__ = ["create_prep", "get_prep", "update_prep"]
