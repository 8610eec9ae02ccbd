from __future__ import annotations

from datetime import date

import pytest
from prometheus_client import REGISTRY
from sqlalchemy import select
from sqlalchemy.orm import Session

from tests.conftest import enroll, make_relationship, principal
from transformation_os.models import (
    EnrollmentRole,
    EnrollmentStatus,
    MentoringRelationship,
    MentoringSession,
    Program,
)
from transformation_os.services.scope import AllInTenant, RestrictedTo, resolve_scope
from transformation_os.services.sessions import list_sessions


def _tenant_relationship_ids(session: Session, tenant_id: str) -> set[str]:
    return set(
        session.scalars(select(MentoringRelationship.id).where(MentoringRelationship.tenant_id == tenant_id))
    )


def _visible_ids(session: Session, scope) -> set[str]:
    if scope.is_empty():
        return set()
    return set(session.scalars(select(MentoringRelationship.id).where(scope.relationship_clause())))


def test_tenant_admin_sees_whole_tenant(db_session: Session, world) -> None:
    scope = resolve_scope(db_session, user=principal(world.admin), tenant_id=world.tenant.id)

    assert scope == AllInTenant(world.tenant.id)
    assert _visible_ids(db_session, scope) == {world.rel_one.id, world.rel_two.id, world.rel_three.id}


def test_agency_admin_with_view_all_sees_whole_tenant(db_session: Session, world) -> None:
    scope = resolve_scope(db_session, user=principal(world.agency_admin), tenant_id=world.tenant.id)

    assert isinstance(scope, AllInTenant)


@pytest.mark.parametrize("attribute", ["mentor_one", "mentee_one"])
def test_mentor_and_mentee_both_see_their_relationship(db_session: Session, world, attribute: str) -> None:
    user = getattr(world, attribute)

    scope = resolve_scope(db_session, user=principal(user), tenant_id=world.tenant.id)

    assert isinstance(scope, RestrictedTo)
    assert scope.relationship_ids == frozenset({world.rel_one.id})


def test_unrelated_learner_resolves_to_empty_scope(db_session: Session, world) -> None:
    scope = resolve_scope(db_session, user=principal(world.bystander), tenant_id=world.tenant.id)

    assert scope == RestrictedTo(world.tenant.id, frozenset())
    assert scope.is_empty()
    assert scope.kind == "empty"


def test_participation_is_limited_to_the_requested_tenant(db_session: Session, world) -> None:
    scope = resolve_scope(db_session, user=principal(world.mentor_one), tenant_id=world.sister_tenant.id)

    assert scope.is_empty()


def test_facilitator_sees_relationships_of_enrolled_mentors_only(db_session: Session, world) -> None:
    scope = resolve_scope(db_session, user=principal(world.facilitator), tenant_id=world.tenant.id)

    assert isinstance(scope, RestrictedTo)
    assert world.rel_one.id in scope.relationship_ids
    assert world.rel_two.id in scope.relationship_ids
    assert world.rel_three.id not in scope.relationship_ids


def test_facilitator_without_active_facilitation_sees_nothing(db_session: Session, world) -> None:
    for enrollment in world.program.enrollments:
        if enrollment.role == EnrollmentRole.FACILITATOR:
            enrollment.status = EnrollmentStatus.DROPPED
    db_session.commit()

    scope = resolve_scope(db_session, user=principal(world.facilitator), tenant_id=world.tenant.id)

    assert scope == RestrictedTo(world.tenant.id, frozenset())


def test_facilitator_with_no_active_mentors_sees_nothing(db_session: Session, world) -> None:
    for enrollment in world.program.enrollments:
        if enrollment.role == EnrollmentRole.MENTOR:
            enrollment.status = EnrollmentStatus.COMPLETED
    db_session.commit()

    scope = resolve_scope(db_session, user=principal(world.facilitator), tenant_id=world.tenant.id)

    assert scope.is_empty()


def test_facilitation_for_another_tenant_does_not_count(db_session: Session, world) -> None:
    other_program = Program(agency_id=world.agency.id, tenant_id=world.sister_tenant.id, name="Globex Cohort")
    db_session.add(other_program)
    db_session.flush()
    enroll(db_session, program=other_program, user=world.mentor_three, role=EnrollmentRole.MENTOR)
    facilitation = enroll(
        db_session, program=other_program, user=world.facilitator, role=EnrollmentRole.FACILITATOR
    )
    facilitation.tenant_id = world.sister_tenant.id
    db_session.commit()

    scope = resolve_scope(db_session, user=principal(world.facilitator), tenant_id=world.tenant.id)

    assert world.rel_three.id not in scope.relationship_ids


def test_facilitator_own_participation_is_excluded_by_default(db_session: Session, world) -> None:
    own = make_relationship(db_session, tenant=world.tenant, mentor=world.facilitator, mentee=world.bystander)
    db_session.commit()

    scope = resolve_scope(db_session, user=principal(world.facilitator), tenant_id=world.tenant.id)

    assert own.id not in scope.relationship_ids


def test_facilitator_own_participation_can_be_included(db_session: Session, world) -> None:
    own = make_relationship(db_session, tenant=world.tenant, mentor=world.facilitator, mentee=world.bystander)
    db_session.commit()

    scope = resolve_scope(
        db_session,
        user=principal(world.facilitator),
        tenant_id=world.tenant.id,
        include_own_participation=True,
    )

    assert own.id in scope.relationship_ids
    assert {world.rel_one.id, world.rel_two.id} <= scope.relationship_ids


def test_every_derived_scope_is_contained_in_the_admin_scope(db_session: Session, world) -> None:
    admin_ids = _visible_ids(
        db_session, resolve_scope(db_session, user=principal(world.admin), tenant_id=world.tenant.id)
    )
    assert admin_ids == _tenant_relationship_ids(db_session, world.tenant.id)

    for user in (
        world.facilitator,
        world.mentor_one,
        world.mentor_two,
        world.mentor_three,
        world.mentee_one,
        world.bystander,
    ):
        scope = resolve_scope(db_session, user=principal(user), tenant_id=world.tenant.id)
        assert _visible_ids(db_session, scope) <= admin_ids


def test_all_in_tenant_does_not_reach_other_tenants_sessions(db_session: Session, world) -> None:
    foreign = make_relationship(
        db_session, tenant=world.sister_tenant, mentor=world.sister_learner, mentee=world.mentee_one
    )
    db_session.add_all(
        [
            MentoringSession(relationship_id=foreign.id, title="Foreign", scheduled_date=date(2024, 5, 1)),
            MentoringSession(relationship_id=world.rel_one.id, title="Home", scheduled_date=date(2024, 5, 2)),
        ]
    )
    db_session.commit()

    rows = list_sessions(db_session, scope=AllInTenant(world.tenant.id))

    assert [row.title for row in rows] == ["Home"]


def test_resolution_is_counted_by_kind(db_session: Session, world) -> None:
    before = REGISTRY.get_sample_value("mentoring_scope_resolutions_total", {"kind": "empty"}) or 0.0

    resolve_scope(db_session, user=principal(world.bystander), tenant_id=world.tenant.id)

    after = REGISTRY.get_sample_value("mentoring_scope_resolutions_total", {"kind": "empty"})
    assert after == before + 1
