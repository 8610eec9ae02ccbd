"""Mentoring relationship store."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from transformation_os.models import MentoringRelationship, RelationshipStatus, RelationshipType, User
from transformation_os.models.base import utcnow
from transformation_os.obs import record_access_denial
from transformation_os.services.errors import BadRequestError, NotFoundError
from transformation_os.services.scope import Scope

logger = logging.getLogger(__name__)


def list_relationships(session: Session, *, scope: Scope) -> list[MentoringRelationship]:
    if scope.is_empty():
        return []
    statement = (
        select(MentoringRelationship)
        .options(selectinload(MentoringRelationship.mentor), selectinload(MentoringRelationship.mentee))
        .where(scope.relationship_clause())
        .order_by(MentoringRelationship.started_at.desc())
    )
    return list(session.scalars(statement))


def get_scoped_relationship(session: Session, *, scope: Scope, relationship_id: str) -> MentoringRelationship:
    """Load a relationship, reporting anything outside ``scope`` as missing."""

    relationship = session.get(MentoringRelationship, relationship_id)
    if relationship is None or not scope.includes(relationship):
        if relationship is not None:
            record_access_denial("relationship_out_of_scope")
        raise NotFoundError(f"Relationship '{relationship_id}' was not found")
    return relationship


def create_relationship(
    session: Session,
    *,
    tenant_id: str,
    mentor_id: str,
    mentee_id: str,
    relationship_type: RelationshipType = RelationshipType.MENTOR,
    description: str | None = None,
    goals: str | None = None,
    meeting_preferences: dict[str, Any] | None = None,
) -> MentoringRelationship:
    if mentor_id == mentee_id:
        raise BadRequestError("Mentor and mentee must be different users")

    members = set(
        session.scalars(
            select(User.id).where(User.id.in_([mentor_id, mentee_id]), User.tenant_id == tenant_id)
        )
    )
    if mentor_id not in members:
        raise BadRequestError("Mentor is not a member of this tenant")
    if mentee_id not in members:
        raise BadRequestError("Mentee is not a member of this tenant")

    duplicate = session.scalars(
        select(MentoringRelationship.id).where(
            MentoringRelationship.mentor_id == mentor_id,
            MentoringRelationship.mentee_id == mentee_id,
            MentoringRelationship.relationship_type == relationship_type,
        )
    ).first()
    if duplicate is not None:
        raise BadRequestError("A relationship of this type already exists for this pair")

    relationship = MentoringRelationship(
        tenant_id=tenant_id,
        mentor_id=mentor_id,
        mentee_id=mentee_id,
        relationship_type=relationship_type,
        status=RelationshipStatus.ACTIVE,
        description=description,
        goals=goals,
        meeting_preferences=meeting_preferences,
    )
    session.add(relationship)
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise BadRequestError("A relationship of this type already exists for this pair") from exc

    session.commit()
    session.refresh(relationship)
    logger.info(
        "Created mentoring relationship",
        extra={"tenant_id": tenant_id, "relationship_id": relationship.id},
    )
    return relationship


def end_relationship(
    session: Session,
    *,
    tenant_id: str,
    relationship_id: str,
    now: datetime | None = None,
) -> MentoringRelationship:
    """Soft-terminate a relationship. Ending an ended relationship is a no-op."""

    relationship = session.get(MentoringRelationship, relationship_id)
    if relationship is None or relationship.tenant_id != tenant_id:
        raise NotFoundError(f"Relationship '{relationship_id}' was not found")

    if relationship.status != RelationshipStatus.ENDED:
        relationship.status = RelationshipStatus.ENDED
        relationship.ended_at = now or utcnow()
        session.commit()
        session.refresh(relationship)
        logger.info(
            "Ended mentoring relationship",
            extra={"tenant_id": tenant_id, "relationship_id": relationship_id},
        )
    return relationship


__all__ = [
    "create_relationship",
    "end_relationship",
    "get_scoped_relationship",
    "list_relationships",
]
