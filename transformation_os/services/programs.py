"""Program listing and the enrollment directory."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from transformation_os.core.permissions import Capability
from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import (
    Enrollment,
    EnrollmentRole,
    EnrollmentStatus,
    Program,
    Tenant,
    User,
)
from transformation_os.services.errors import BadRequestError, DuplicateEnrollmentError, NotFoundError
from transformation_os.services.tenants import program_access_clause

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class EnrollmentPage:
    """One page of a program's enrollments."""

    items: list[Enrollment]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


def list_programs(session: Session, *, tenant: Tenant) -> list[Program]:
    statement = (
        select(Program)
        .where(program_access_clause(tenant.id, tenant.agency_id))
        .order_by(Program.name)
    )
    return list(session.scalars(statement))


def get_visible_program(session: Session, *, tenant: Tenant, program_id: str) -> Program:
    statement = select(Program).where(
        Program.id == program_id, program_access_clause(tenant.id, tenant.agency_id)
    )
    program = session.scalars(statement).first()
    if program is None:
        raise NotFoundError(f"Program '{program_id}' was not found")
    return program


def list_enrollments(
    session: Session,
    *,
    user: AuthenticatedUser,
    tenant: Tenant,
    program_id: str,
    role: EnrollmentRole | None = None,
    status: EnrollmentStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> EnrollmentPage:
    """List enrollments of a visible program.

    Callers who only see their assigned mentoring records only get their own
    enrollment back.
    """

    get_visible_program(session, tenant=tenant, program_id=program_id)

    conditions = [Enrollment.program_id == program_id]
    if role is not None:
        conditions.append(Enrollment.role == role)
    if status is not None:
        conditions.append(Enrollment.status == status)
    if (
        Capability.MENTORING_VIEW_ASSIGNED in user.capabilities
        and Capability.MENTORING_VIEW_ALL not in user.capabilities
    ):
        conditions.append(Enrollment.user_id == user.id)

    where = and_(*conditions)
    total = session.scalar(select(func.count()).select_from(Enrollment).where(where)) or 0
    statement = (
        select(Enrollment)
        .options(selectinload(Enrollment.user))
        .where(where)
        .order_by(Enrollment.enrolled_at.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    return EnrollmentPage(items=list(session.scalars(statement)), total=total, page=page, limit=limit)


def enroll_user(
    session: Session,
    *,
    tenant: Tenant,
    program_id: str,
    user_id: str,
    role: EnrollmentRole = EnrollmentRole.LEARNER,
) -> Enrollment:
    """Enroll ``user_id`` in a program visible to ``tenant``.

    Users from another tenant may be enrolled when their own tenant can also
    see the program.
    """

    get_visible_program(session, tenant=tenant, program_id=program_id)

    enrollee = session.get(User, user_id)
    if enrollee is None:
        raise NotFoundError(f"User '{user_id}' was not found")

    if enrollee.tenant_id and enrollee.tenant_id != tenant.id:
        home_tenant = session.get(Tenant, enrollee.tenant_id)
        home_agency_id = home_tenant.agency_id if home_tenant is not None else None
        visible_at_home = session.scalars(
            select(Program.id).where(
                Program.id == program_id, program_access_clause(enrollee.tenant_id, home_agency_id)
            )
        ).first()
        if visible_at_home is None:
            raise BadRequestError("User's organization does not have access to this program")

    existing = session.scalars(
        select(Enrollment.id).where(Enrollment.program_id == program_id, Enrollment.user_id == user_id)
    ).first()
    if existing is not None:
        raise DuplicateEnrollmentError("User is already enrolled in this program")

    enrollment = Enrollment(
        program_id=program_id,
        user_id=user_id,
        tenant_id=enrollee.tenant_id or tenant.id,
        role=role,
        status=EnrollmentStatus.ACTIVE,
    )
    session.add(enrollment)
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise DuplicateEnrollmentError("User is already enrolled in this program") from exc

    session.commit()
    session.refresh(enrollment)
    logger.info(
        "Enrolled user in program",
        extra={"program_id": program_id, "user_id": user_id, "role": role.value},
    )
    return enrollment


__all__ = [
    "EnrollmentPage",
    "enroll_user",
    "get_visible_program",
    "list_enrollments",
    "list_programs",
]
