"""Seed an agency, a client tenant, one user per role and a mentoring pair."""
from __future__ import annotations

import logging
import os

from sqlalchemy import select
from sqlalchemy.orm import Session

from transformation_os.core.permissions import SystemRole
from transformation_os.core.security import hash_password
from transformation_os.db.session import engine, get_session
from transformation_os.models import (
    Agency,
    Base,
    Enrollment,
    EnrollmentRole,
    MentoringRelationship,
    Program,
    ProgramStatus,
    Tenant,
    User,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_PASSWORD = os.environ.get("DEMO_PASSWORD", "changeme")

AGENCY_USERS = [
    ("owner@agency.local", SystemRole.AGENCY_OWNER, "Olive", "Owner"),
    ("admin@agency.local", SystemRole.AGENCY_ADMIN, "Adam", "Agency"),
]
TENANT_USERS = [
    ("admin@demo.local", SystemRole.TENANT_ADMIN, "Tara", "Admin"),
    ("facilitator@demo.local", SystemRole.FACILITATOR, "Felix", "Facilitator"),
    ("mentor@demo.local", SystemRole.MENTOR, "Maya", "Mentor"),
    ("learner@demo.local", SystemRole.LEARNER, "Liam", "Learner"),
]


def _get_or_create_user(
    session: Session,
    *,
    email: str,
    role: SystemRole,
    first_name: str,
    last_name: str,
    hashed_password: str,
    tenant: Tenant | None = None,
    agency: Agency | None = None,
) -> User:
    user = session.scalars(select(User).where(User.email == email)).first()
    if user is not None:
        logger.info("User %s already exists", email)
        return user
    user = User(
        email=email,
        role=role,
        first_name=first_name,
        last_name=last_name,
        hashed_password=hashed_password,
        tenant_id=tenant.id if tenant is not None else None,
        agency_id=agency.id if agency is not None else None,
    )
    session.add(user)
    session.flush()
    logger.info("Added user %s (%s)", email, role.value)
    return user


def seed(session: Session) -> None:
    """Seed demo records. Safe to run repeatedly."""

    agency = session.scalars(select(Agency).where(Agency.slug == "demo-agency")).first()
    if agency is None:
        agency = Agency(name="Demo Agency", slug="demo-agency")
        session.add(agency)
        session.flush()
        logger.info("Created agency %s", agency.id)

    tenant = session.scalars(select(Tenant).where(Tenant.agency_id == agency.id, Tenant.slug == "demo")).first()
    if tenant is None:
        tenant = Tenant(agency_id=agency.id, name="Demo Client", slug="demo")
        session.add(tenant)
        session.flush()
        logger.info("Created tenant %s", tenant.id)

    hashed = hash_password(DEMO_PASSWORD)
    for email, role, first_name, last_name in AGENCY_USERS:
        _get_or_create_user(
            session,
            email=email,
            role=role,
            first_name=first_name,
            last_name=last_name,
            hashed_password=hashed,
            agency=agency,
        )
    users = {
        role: _get_or_create_user(
            session,
            email=email,
            role=role,
            first_name=first_name,
            last_name=last_name,
            hashed_password=hashed,
            tenant=tenant,
        )
        for email, role, first_name, last_name in TENANT_USERS
    }

    program = session.scalars(select(Program).where(Program.tenant_id == tenant.id)).first()
    if program is None:
        program = Program(
            agency_id=agency.id, tenant_id=tenant.id, name="Leadership Foundations", status=ProgramStatus.ACTIVE
        )
        session.add(program)
        session.flush()
        for role, enrollment_role in (
            (SystemRole.FACILITATOR, EnrollmentRole.FACILITATOR),
            (SystemRole.MENTOR, EnrollmentRole.MENTOR),
            (SystemRole.LEARNER, EnrollmentRole.LEARNER),
        ):
            session.add(
                Enrollment(
                    program_id=program.id, user_id=users[role].id, tenant_id=tenant.id, role=enrollment_role
                )
            )
        logger.info("Created program %s", program.name)

    mentor, learner = users[SystemRole.MENTOR], users[SystemRole.LEARNER]
    pair = session.scalars(
        select(MentoringRelationship).where(
            MentoringRelationship.mentor_id == mentor.id, MentoringRelationship.mentee_id == learner.id
        )
    ).first()
    if pair is None:
        session.add(
            MentoringRelationship(
                tenant_id=tenant.id, mentor_id=mentor.id, mentee_id=learner.id, goals="First 90 days"
            )
        )
        logger.info("Paired %s with %s", mentor.email, learner.email)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        seed(session)


if __name__ == "__main__":
    main()
