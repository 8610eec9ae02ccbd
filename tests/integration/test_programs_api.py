from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from transformation_os.models import Program


def _programs_url(tenant) -> str:
    return f"/api/tenants/{tenant.id}/programs"


def test_programs_listing_includes_agency_wide(
    client: TestClient, auth_headers_for, world, db_session: Session
) -> None:
    db_session.add(Program(agency_id=world.agency.id, tenant_id=None, name="Agency Essentials"))
    db_session.add(Program(agency_id=world.agency.id, tenant_id=world.sister_tenant.id, name="Globex Only"))
    db_session.commit()

    response = client.get(_programs_url(world.tenant), headers=auth_headers_for(world.mentee_one))

    assert response.status_code == 200
    assert [row["name"] for row in response.json()["data"]] == ["Agency Essentials", "Leadership Lab"]
    assert response.json()["data"][1]["allowedTenantIds"] == []


def test_enrollment_listing_is_paginated(client: TestClient, auth_headers_for, world) -> None:
    response = client.get(
        f"{_programs_url(world.tenant)}/{world.program.id}/enrollments",
        params={"role": "mentor", "limit": 1, "page": 2},
        headers=auth_headers_for(world.admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 1
    assert body["data"][0]["role"] == "mentor"
    assert body["data"][0]["user"]["firstName"] == "Test"
    assert body["meta"]["pagination"] == {
        "page": 2,
        "limit": 1,
        "total": 2,
        "totalPages": 2,
        "hasNext": False,
        "hasPrev": True,
    }


def test_learner_only_sees_own_enrollment(client: TestClient, auth_headers_for, world) -> None:
    response = client.get(
        f"{_programs_url(world.tenant)}/{world.program.id}/enrollments",
        headers=auth_headers_for(world.mentee_one),
    )

    assert [row["userId"] for row in response.json()["data"]] == [world.mentee_one.id]


def test_enroll_then_conflict(client: TestClient, auth_headers_for, world) -> None:
    url = f"{_programs_url(world.tenant)}/{world.program.id}/enrollments"
    headers = auth_headers_for(world.admin)

    first = client.post(url, json={"userId": world.mentee_two.id, "role": "learner"}, headers=headers)
    second = client.post(url, json={"userId": world.mentee_two.id}, headers=headers)

    assert first.status_code == 201
    assert first.json()["data"]["tenantId"] == world.tenant.id
    assert second.status_code == 409


def test_enrolling_requires_enroll_capability(client: TestClient, auth_headers_for, world) -> None:
    response = client.post(
        f"{_programs_url(world.tenant)}/{world.program.id}/enrollments",
        json={"userId": world.mentee_two.id},
        headers=auth_headers_for(world.mentor_one),
    )

    assert response.status_code == 403


def test_cross_tenant_enrollment_without_home_access_is_rejected(
    client: TestClient, auth_headers_for, world
) -> None:
    response = client.post(
        f"{_programs_url(world.tenant)}/{world.program.id}/enrollments",
        json={"userId": world.sister_learner.id},
        headers=auth_headers_for(world.admin),
    )

    assert response.status_code == 400


def test_unknown_program_is_not_found(client: TestClient, auth_headers_for, world) -> None:
    response = client.get(
        f"{_programs_url(world.tenant)}/missing/enrollments", headers=auth_headers_for(world.admin)
    )

    assert response.status_code == 404
