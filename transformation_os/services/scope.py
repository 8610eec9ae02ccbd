"""Mentoring scope resolution.

A scope says which mentoring relationships a caller may read or act on inside
one tenant. It is either every relationship of the tenant
(:class:`AllInTenant`) or an explicit, possibly empty, set of relationship ids
(:class:`RestrictedTo`). Every store builds its filters from the scope value
instead of re-deriving the role branches itself.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, false, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from transformation_os.core.permissions import Capability, RoleLevel
from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import (
    Enrollment,
    EnrollmentRole,
    EnrollmentStatus,
    MentoringRelationship,
)
from transformation_os.obs import access_span, record_scope_resolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AllInTenant:
    """Unrestricted access to the relationships of one tenant."""

    tenant_id: str

    @property
    def kind(self) -> str:
        return "all"

    def is_empty(self) -> bool:
        return False

    def includes(self, relationship: MentoringRelationship) -> bool:
        return relationship.tenant_id == self.tenant_id

    def relationship_clause(self) -> ColumnElement[bool]:
        return MentoringRelationship.tenant_id == self.tenant_id

    def restrict(self, relationship_id_column: Any) -> ColumnElement[bool]:
        """Filter rows hanging off a relationship to this tenant's relationships."""
        tenant_relationships = select(MentoringRelationship.id).where(
            MentoringRelationship.tenant_id == self.tenant_id
        )
        return relationship_id_column.in_(tenant_relationships)


@dataclass(frozen=True, slots=True)
class RestrictedTo:
    """Access limited to an explicit set of relationship ids in one tenant."""

    tenant_id: str
    relationship_ids: frozenset[str]

    @property
    def kind(self) -> str:
        return "restricted" if self.relationship_ids else "empty"

    def is_empty(self) -> bool:
        return not self.relationship_ids

    def includes(self, relationship: MentoringRelationship) -> bool:
        return relationship.tenant_id == self.tenant_id and relationship.id in self.relationship_ids

    def relationship_clause(self) -> ColumnElement[bool]:
        if not self.relationship_ids:
            return false()
        return and_(
            MentoringRelationship.tenant_id == self.tenant_id,
            MentoringRelationship.id.in_(sorted(self.relationship_ids)),
        )

    def restrict(self, relationship_id_column: Any) -> ColumnElement[bool]:
        if not self.relationship_ids:
            return false()
        return relationship_id_column.in_(sorted(self.relationship_ids))


Scope = AllInTenant | RestrictedTo


def _participation_ids(session: Session, *, user_id: str, tenant_id: str) -> frozenset[str]:
    statement = select(MentoringRelationship.id).where(
        MentoringRelationship.tenant_id == tenant_id,
        (MentoringRelationship.mentor_id == user_id) | (MentoringRelationship.mentee_id == user_id),
    )
    return frozenset(session.scalars(statement))


def _facilitated_ids(session: Session, *, user_id: str, tenant_id: str) -> frozenset[str]:
    program_ids = list(
        session.scalars(
            select(Enrollment.program_id).where(
                Enrollment.user_id == user_id,
                Enrollment.tenant_id == tenant_id,
                Enrollment.role == EnrollmentRole.FACILITATOR,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
        )
    )
    if not program_ids:
        return frozenset()

    mentor_ids = set(
        session.scalars(
            select(Enrollment.user_id).where(
                Enrollment.program_id.in_(program_ids),
                Enrollment.role == EnrollmentRole.MENTOR,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
        )
    )
    if not mentor_ids:
        return frozenset()

    statement = select(MentoringRelationship.id).where(
        MentoringRelationship.tenant_id == tenant_id,
        MentoringRelationship.mentor_id.in_(sorted(mentor_ids)),
    )
    return frozenset(session.scalars(statement))


def resolve_scope(
    session: Session,
    *,
    user: AuthenticatedUser,
    tenant_id: str,
    include_own_participation: bool = False,
) -> Scope:
    """Compute the relationships ``user`` may see inside ``tenant_id``.

    * Without ``MENTORING_VIEW_ALL`` the caller sees relationships they take
      part in as mentor or mentee.
    * A facilitator-tier caller with ``MENTORING_VIEW_ALL`` sees relationships
      whose mentor holds an active mentor enrollment in a program the caller
      actively facilitates for this tenant. No facilitation means an empty
      scope. ``include_own_participation`` additionally unions in the
      facilitator's own relationships.
    * Anyone else holding ``MENTORING_VIEW_ALL`` sees the whole tenant.
    """

    with access_span(
        "mentoring.resolve_scope",
        **{"user.id": user.id, "tenant.id": tenant_id, "user.role_level": int(user.role_level)},
    ) as span:
        scope: Scope
        if Capability.MENTORING_VIEW_ALL not in user.capabilities:
            scope = RestrictedTo(
                tenant_id, _participation_ids(session, user_id=user.id, tenant_id=tenant_id)
            )
        elif user.role_level == RoleLevel.FACILITATOR:
            relationship_ids = _facilitated_ids(session, user_id=user.id, tenant_id=tenant_id)
            if include_own_participation:
                relationship_ids |= _participation_ids(session, user_id=user.id, tenant_id=tenant_id)
            scope = RestrictedTo(tenant_id, relationship_ids)
        else:
            scope = AllInTenant(tenant_id)
        span.set_attribute("scope.kind", scope.kind)

    record_scope_resolution(scope.kind)
    logger.debug(
        "Resolved mentoring scope",
        extra={
            "user_id": user.id,
            "tenant_id": tenant_id,
            "scope_kind": scope.kind,
            "scope_size": len(scope.relationship_ids) if isinstance(scope, RestrictedTo) else None,
        },
    )
    return scope


__all__ = ["AllInTenant", "RestrictedTo", "Scope", "resolve_scope"]
