from __future__ import annotations

from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from transformation_os.core.config import get_settings
from transformation_os.main import app
from transformation_os.models import ActionItem, MentoringSession, SessionStatus


def _base(world) -> str:
    return f"/api/tenants/{world.tenant.id}/mentoring"


def _relationship_ids(response) -> set[str]:
    assert response.status_code == 200
    return {row["id"] for row in response.json()["data"]}


def test_each_role_sees_its_own_slice(client: TestClient, auth_headers_for, world) -> None:
    url = f"{_base(world)}/relationships"

    mentor_view = _relationship_ids(client.get(url, headers=auth_headers_for(world.mentor_one)))
    bystander_view = _relationship_ids(client.get(url, headers=auth_headers_for(world.bystander)))
    admin_view = _relationship_ids(client.get(url, headers=auth_headers_for(world.admin)))

    assert mentor_view == {world.rel_one.id}
    assert bystander_view == set()
    assert admin_view == {world.rel_one.id, world.rel_two.id, world.rel_three.id}


def test_relationships_are_returned_in_camel_case_with_participants(
    client: TestClient, auth_headers_for, world
) -> None:
    response = client.get(f"{_base(world)}/relationships", headers=auth_headers_for(world.mentee_one))

    (row,) = response.json()["data"]
    assert row["mentorId"] == world.mentor_one.id
    assert row["relationshipType"] == "mentor"
    assert row["mentor"]["firstName"] == "Test"
    assert "mentor_id" not in row


def test_manager_creates_and_ends_relationships(client: TestClient, auth_headers_for, world) -> None:
    headers = auth_headers_for(world.admin)
    payload = {"mentorId": world.mentor_three.id, "menteeId": world.bystander.id, "goals": "Onboarding"}

    created = client.post(f"{_base(world)}/relationships", json=payload, headers=headers)
    assert created.status_code == 201
    relationship_id = created.json()["data"]["id"]

    duplicate = client.post(f"{_base(world)}/relationships", json=payload, headers=headers)
    assert duplicate.status_code == 400

    ended = client.delete(f"{_base(world)}/relationships/{relationship_id}", headers=headers)
    assert ended.status_code == 200
    assert ended.json()["data"]["status"] == "ended"
    assert ended.json()["data"]["endedAt"] is not None


def test_relationship_management_needs_manage_capability(client: TestClient, auth_headers_for, world) -> None:
    payload = {"mentorId": world.mentor_one.id, "menteeId": world.bystander.id}

    response = client.post(
        f"{_base(world)}/relationships", json=payload, headers=auth_headers_for(world.facilitator)
    )

    assert response.status_code == 403


def test_foreign_tenant_is_forbidden_and_other_agency_is_missing(
    client: TestClient, auth_headers_for, world
) -> None:
    tenant_user = client.get(
        f"/api/tenants/{world.sister_tenant.id}/mentoring/relationships",
        headers=auth_headers_for(world.mentor_one),
    )
    agency_user = client.get(
        f"/api/tenants/{world.rival_tenant.id}/mentoring/relationships",
        headers=auth_headers_for(world.agency_admin),
    )

    assert tenant_user.status_code == 403
    assert agency_user.status_code == 404


def test_agency_admin_sees_client_tenant(client: TestClient, auth_headers_for, world) -> None:
    response = client.get(f"{_base(world)}/relationships", headers=auth_headers_for(world.agency_admin))

    assert _relationship_ids(response) == {world.rel_one.id, world.rel_two.id, world.rel_three.id}


def test_missing_or_bad_token_is_rejected(client: TestClient, world) -> None:
    missing = client.get(f"{_base(world)}/relationships")
    garbage = client.get(f"{_base(world)}/relationships", headers={"Authorization": "Bearer nope"})

    assert missing.status_code in {401, 403}
    assert garbage.status_code == 401


def test_session_lifecycle_through_prep(client: TestClient, auth_headers_for, world) -> None:
    mentor = auth_headers_for(world.mentor_one)
    mentee = auth_headers_for(world.mentee_one)
    base = _base(world)

    created = client.post(
        f"{base}/sessions",
        json={"relationshipId": world.rel_one.id, "title": "Kickoff", "scheduledDate": "2024-09-10"},
        headers=mentor,
    )
    assert created.status_code == 201
    session_id = created.json()["data"]["id"]
    assert created.json()["data"]["status"] == "scheduled"

    empty = client.get(f"{base}/sessions/{session_id}/prep", headers=mentor)
    assert empty.status_code == 200
    assert empty.json() == {"data": None}

    forbidden = client.post(f"{base}/sessions/{session_id}/prep", json={"wins": "n/a"}, headers=mentor)
    assert forbidden.status_code == 403

    prep = client.post(
        f"{base}/sessions/{session_id}/prep",
        json={"wins": "Launched beta", "topicsToDiscuss": ["hiring"]},
        headers=mentee,
    )
    assert prep.status_code == 201
    assert prep.json()["data"]["topicsToDiscuss"] == ["hiring"]

    again = client.post(f"{base}/sessions/{session_id}/prep", json={"wins": "again"}, headers=mentee)
    assert again.status_code == 400

    updated = client.put(f"{base}/sessions/{session_id}/prep", json={"challenges": "Scope"}, headers=mentee)
    assert updated.status_code == 200
    assert updated.json()["data"]["wins"] == "Launched beta"
    assert updated.json()["data"]["challenges"] == "Scope"

    session_view = client.get(f"{base}/sessions", params={"relationshipId": world.rel_one.id}, headers=mentor)
    assert [row["status"] for row in session_view.json()["data"]] == ["ready"]

    backwards = client.put(f"{base}/sessions/{session_id}", json={"status": "scheduled"}, headers=mentor)
    assert backwards.status_code == 400

    cancelled = client.delete(f"{base}/sessions/{session_id}", headers=mentor)
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["status"] == "cancelled"

    closed = client.put(f"{base}/sessions/{session_id}/prep", json={"wins": "late"}, headers=mentee)
    assert closed.status_code == 400


def test_sessions_outside_scope_look_missing(
    client: TestClient, auth_headers_for, world, db_session: Session
) -> None:
    other = MentoringSession(relationship_id=world.rel_two.id, scheduled_date=date(2024, 9, 1))
    db_session.add(other)
    db_session.commit()
    headers = auth_headers_for(world.mentee_one)

    assert client.get(f"{_base(world)}/sessions/{other.id}/prep", headers=headers).status_code == 404
    assert client.put(f"{_base(world)}/sessions/{other.id}", json={"agenda": "x"}, headers=headers).status_code == 404
    assert client.get(f"{_base(world)}/sessions/{other.id}/notes", headers=headers).status_code == 404


def test_notes_respect_visibility(client: TestClient, auth_headers_for, world, db_session: Session) -> None:
    mentoring_session = MentoringSession(relationship_id=world.rel_one.id, scheduled_date=date(2024, 9, 1))
    db_session.add(mentoring_session)
    db_session.commit()
    url = f"{_base(world)}/sessions/{mentoring_session.id}/notes"
    mentor = auth_headers_for(world.mentor_one)
    mentee = auth_headers_for(world.mentee_one)

    private = client.post(url, json={"content": "mentor only"}, headers=mentor)
    shared = client.post(url, json={"content": "for both", "visibility": "shared"}, headers=mentor)
    assert private.status_code == 201
    assert private.json()["data"]["visibility"] == "private"
    assert shared.status_code == 201

    assert {note["content"] for note in client.get(url, headers=mentor).json()["data"]} == {
        "mentor only",
        "for both",
    }
    assert [note["content"] for note in client.get(url, headers=mentee).json()["data"]] == ["for both"]


def test_action_items_and_stats(client: TestClient, auth_headers_for, world, db_session: Session) -> None:
    mentee = auth_headers_for(world.mentee_one)
    base = _base(world)
    yesterday = (date.today() - timedelta(days=1)).isoformat()

    created = client.post(
        f"{base}/action-items",
        json={"relationshipId": world.rel_one.id, "title": "Draft plan", "dueDate": yesterday},
        headers=mentee,
    )
    assert created.status_code == 201
    item = created.json()["data"]
    assert item["ownerId"] == world.mentee_one.id
    assert item["priority"] == "medium"

    bad_owner = client.post(
        f"{base}/action-items",
        json={"relationshipId": world.rel_one.id, "title": "x", "ownerId": world.bystander.id},
        headers=mentee,
    )
    assert bad_owner.status_code == 400

    stats = client.get(f"{base}/stats", headers=mentee).json()["data"]
    assert stats["totalRelationships"] == 1
    assert stats["openActionItems"] == 1
    assert stats["overdueActionItems"] == 1

    done = client.put(f"{base}/action-items/{item['id']}", json={"status": "completed"}, headers=mentee)
    assert done.status_code == 200
    assert done.json()["data"]["completedAt"] is not None

    listed = client.get(f"{base}/action-items", params={"status": "completed"}, headers=mentee)
    assert [row["id"] for row in listed.json()["data"]] == [item["id"]]

    foreign = ActionItem(relationship_id=world.rel_two.id, owner_id=world.mentee_two.id, title="theirs")
    db_session.add(foreign)
    db_session.commit()
    hidden = client.put(f"{base}/action-items/{foreign.id}", json={"title": "mine now"}, headers=mentee)
    assert hidden.status_code == 404


def test_bystander_stats_are_zero(client: TestClient, auth_headers_for, world) -> None:
    response = client.get(f"{_base(world)}/stats", headers=auth_headers_for(world.bystander))

    assert response.status_code == 200
    assert set(response.json()["data"].values()) == {0}


def test_facilitator_sees_enrolled_mentors_and_optionally_own(
    client: TestClient, auth_headers_for, world, db_session: Session
) -> None:
    own = client.post(
        f"{_base(world)}/relationships",
        json={"mentorId": world.facilitator.id, "menteeId": world.bystander.id},
        headers=auth_headers_for(world.admin),
    ).json()["data"]["id"]
    url = f"{_base(world)}/relationships"
    headers = auth_headers_for(world.facilitator)

    default_view = _relationship_ids(client.get(url, headers=headers))
    assert default_view == {world.rel_one.id, world.rel_two.id}

    settings = get_settings().model_copy(update={"facilitator_includes_own_relationships": True})
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        widened = _relationship_ids(client.get(url, headers=headers))
    finally:
        app.dependency_overrides.pop(get_settings, None)

    assert widened == {world.rel_one.id, world.rel_two.id, own}


def test_session_status_stamps_are_exposed(client: TestClient, auth_headers_for, world, db_session: Session) -> None:
    mentoring_session = MentoringSession(
        relationship_id=world.rel_one.id, scheduled_date=date(2024, 9, 1), status=SessionStatus.READY
    )
    db_session.add(mentoring_session)
    db_session.commit()
    url = f"{_base(world)}/sessions/{mentoring_session.id}"
    headers = auth_headers_for(world.admin)

    started = client.put(url, json={"status": "in_progress"}, headers=headers).json()["data"]
    finished = client.put(url, json={"status": "completed", "summary": "Good"}, headers=headers).json()["data"]

    assert started["startedAt"] is not None
    assert finished["endedAt"] is not None
    assert finished["summary"] == "Good"


def test_explicit_nulls_leave_required_fields_alone(
    client: TestClient, auth_headers_for, world, db_session: Session
) -> None:
    mentoring_session = MentoringSession(relationship_id=world.rel_one.id, scheduled_date=date(2024, 9, 1))
    item = ActionItem(relationship_id=world.rel_one.id, owner_id=world.mentee_one.id, title="Read the brief")
    db_session.add_all([mentoring_session, item])
    db_session.commit()
    base = _base(world)
    headers = auth_headers_for(world.mentee_one)

    session_response = client.put(
        f"{base}/sessions/{mentoring_session.id}",
        json={"scheduledDate": None, "duration": None, "agenda": "Retro"},
        headers=headers,
    )
    item_response = client.put(
        f"{base}/action-items/{item.id}", json={"status": None, "title": None}, headers=headers
    )

    assert session_response.status_code == 200
    assert session_response.json()["data"]["scheduledDate"] == "2024-09-01"
    assert session_response.json()["data"]["duration"] == 60
    assert session_response.json()["data"]["agenda"] == "Retro"
    assert item_response.status_code == 200
    assert item_response.json()["data"]["status"] == "pending"
    assert item_response.json()["data"]["title"] == "Read the brief"
