"""Read-only mentoring rollups over a resolved scope."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from transformation_os.models import (
    ActionItem,
    ActionItemStatus,
    MentoringRelationship,
    MentoringSession,
    RelationshipStatus,
    SessionStatus,
)
from transformation_os.services.scope import Scope

UPCOMING_SESSION_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.PREP_IN_PROGRESS, SessionStatus.READY)
OPEN_ACTION_ITEM_STATUSES = (ActionItemStatus.PENDING, ActionItemStatus.IN_PROGRESS)


@dataclass(slots=True, frozen=True)
class MentoringStats:
    total_relationships: int = 0
    active_relationships: int = 0
    upcoming_sessions: int = 0
    completed_sessions: int = 0
    open_action_items: int = 0
    overdue_action_items: int = 0


def _count_where(condition):
    return func.count(case((condition, 1)))


def compute_stats(session: Session, *, scope: Scope, today: date | None = None) -> MentoringStats:
    """Count relationships, sessions and action items visible through ``scope``.

    An empty scope returns zeros without touching the database.
    """

    if scope.is_empty():
        return MentoringStats()
    today = today or date.today()

    total, active = session.execute(
        select(
            func.count(MentoringRelationship.id),
            _count_where(MentoringRelationship.status == RelationshipStatus.ACTIVE),
        ).where(scope.relationship_clause())
    ).one()

    upcoming, completed = session.execute(
        select(
            _count_where(MentoringSession.status.in_(UPCOMING_SESSION_STATUSES)),
            _count_where(MentoringSession.status == SessionStatus.COMPLETED),
        ).where(scope.restrict(MentoringSession.relationship_id))
    ).one()

    is_open = ActionItem.status.in_(OPEN_ACTION_ITEM_STATUSES)
    open_items, overdue_items = session.execute(
        select(
            _count_where(is_open),
            _count_where(is_open & (ActionItem.due_date < today)),
        ).where(scope.restrict(ActionItem.relationship_id))
    ).one()

    return MentoringStats(
        total_relationships=total or 0,
        active_relationships=active or 0,
        upcoming_sessions=upcoming or 0,
        completed_sessions=completed or 0,
        open_action_items=open_items or 0,
        overdue_action_items=overdue_items or 0,
    )


__all__ = ["MentoringStats", "OPEN_ACTION_ITEM_STATUSES", "UPCOMING_SESSION_STATUSES", "compute_stats"]
