"""Mentoring action items."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import (
    ActionItem,
    ActionItemPriority,
    ActionItemStatus,
    MentoringRelationship,
    MentoringSession,
)
from transformation_os.models.base import utcnow
from transformation_os.obs import record_access_denial
from transformation_os.services.errors import BadRequestError, NotFoundError
from transformation_os.services.relationships import get_scoped_relationship
from transformation_os.services.scope import Scope

_EDITABLE_FIELDS = frozenset({"title", "description", "priority", "status", "due_date", "completed_at"})
_REQUIRED_FIELDS = frozenset({"title", "priority", "status"})


def list_action_items(
    session: Session, *, scope: Scope, status: ActionItemStatus | None = None
) -> list[ActionItem]:
    if scope.is_empty():
        return []
    statement = select(ActionItem).where(scope.restrict(ActionItem.relationship_id))
    if status is not None:
        statement = statement.where(ActionItem.status == status)
    return list(session.scalars(statement.order_by(ActionItem.due_date.desc())))


def create_action_item(
    session: Session,
    *,
    scope: Scope,
    user: AuthenticatedUser,
    relationship_id: str,
    title: str,
    session_id: str | None = None,
    owner_id: str | None = None,
    description: str | None = None,
    priority: ActionItemPriority = ActionItemPriority.MEDIUM,
    due_date: date | None = None,
) -> ActionItem:
    relationship = get_scoped_relationship(session, scope=scope, relationship_id=relationship_id)

    if session_id is not None:
        mentoring_session = session.get(MentoringSession, session_id)
        if mentoring_session is None or mentoring_session.relationship_id != relationship_id:
            raise BadRequestError("Session does not belong to this relationship")

    owner_id = owner_id or user.id
    if not relationship.is_participant(owner_id):
        raise BadRequestError("Action item owner must be the mentor or the mentee")

    item = ActionItem(
        relationship_id=relationship_id,
        session_id=session_id,
        owner_id=owner_id,
        title=title,
        description=description,
        priority=priority,
        status=ActionItemStatus.PENDING,
        due_date=due_date,
    )
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def update_action_item(
    session: Session,
    *,
    scope: Scope,
    action_item_id: str,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> ActionItem:
    """Apply ``changes`` to an action item in scope.

    Moving to ``completed`` without a ``completed_at`` stamps the current time.
    An item that is already completed keeps its stamp. Nulls sent for NOT NULL
    columns are ignored.
    """

    item = session.get(ActionItem, action_item_id)
    if item is None:
        raise NotFoundError(f"Action item '{action_item_id}' was not found")
    relationship = session.get(MentoringRelationship, item.relationship_id)
    if relationship is None or not scope.includes(relationship):
        record_access_denial("action_item_out_of_scope")
        raise NotFoundError(f"Action item '{action_item_id}' was not found")

    was_completed = item.status == ActionItemStatus.COMPLETED
    for field, value in changes.items():
        if field in _EDITABLE_FIELDS and not (value is None and field in _REQUIRED_FIELDS):
            setattr(item, field, value)
    if (
        changes.get("status") == ActionItemStatus.COMPLETED
        and not changes.get("completed_at")
        and (not was_completed or item.completed_at is None)
    ):
        item.completed_at = now or utcnow()

    session.commit()
    session.refresh(item)
    return item


__all__ = ["create_action_item", "list_action_items", "update_action_item"]
