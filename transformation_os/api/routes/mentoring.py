"""Mentoring endpoints: relationships, sessions, notes, prep, action items and stats.

Every read and write goes through the caller's resolved scope. Records
outside it are reported as missing rather than forbidden.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from transformation_os.api.deps import (
    get_accessible_tenant,
    get_db_session,
    get_mentoring_scope,
    mentoring_manager,
    mentoring_viewer,
)
from transformation_os.api.errors import http_error
from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import ActionItemStatus, Tenant
from transformation_os.schemas import (
    ActionItemCreate,
    ActionItemRead,
    ActionItemUpdate,
    DataEnvelope,
    MentoringStatsRead,
    NoteCreate,
    NoteRead,
    PrepCreate,
    PrepRead,
    PrepUpdate,
    RelationshipCreate,
    RelationshipRead,
    SessionCreate,
    SessionRead,
    SessionUpdate,
)
from transformation_os.services import action_items, prep, relationships, sessions, stats
from transformation_os.services.errors import MentoringError
from transformation_os.services.scope import Scope

router = APIRouter(prefix="/tenants/{tenant_id}/mentoring")


# Relationships


@router.get("/relationships", response_model=DataEnvelope[list[RelationshipRead]])
def list_relationships(
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    rows = relationships.list_relationships(session, scope=scope)
    return {"data": [RelationshipRead.model_validate(row) for row in rows]}


@router.post(
    "/relationships",
    response_model=DataEnvelope[RelationshipRead],
    status_code=status.HTTP_201_CREATED,
)
def create_relationship(
    payload: RelationshipCreate,
    tenant: Tenant = Depends(get_accessible_tenant),
    _: AuthenticatedUser = Depends(mentoring_manager),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        relationship = relationships.create_relationship(
            session,
            tenant_id=tenant.id,
            mentor_id=payload.mentor_id,
            mentee_id=payload.mentee_id,
            relationship_type=payload.relationship_type,
            description=payload.description,
            goals=payload.goals,
            meeting_preferences=payload.meeting_preferences,
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": RelationshipRead.model_validate(relationship)}


@router.delete("/relationships/{relationship_id}", response_model=DataEnvelope[RelationshipRead])
def end_relationship(
    relationship_id: str,
    tenant: Tenant = Depends(get_accessible_tenant),
    _: AuthenticatedUser = Depends(mentoring_manager),
    session: Session = Depends(get_db_session),
) -> dict:
    """End a relationship. The record and its history are kept."""

    try:
        relationship = relationships.end_relationship(
            session, tenant_id=tenant.id, relationship_id=relationship_id
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": RelationshipRead.model_validate(relationship)}


# Sessions


@router.get("/sessions", response_model=DataEnvelope[list[SessionRead]])
def list_sessions(
    relationship_id: str | None = Query(default=None, alias="relationshipId"),
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    rows = sessions.list_sessions(session, scope=scope, relationship_id=relationship_id)
    return {"data": [SessionRead.model_validate(row) for row in rows]}


@router.post("/sessions", response_model=DataEnvelope[SessionRead], status_code=status.HTTP_201_CREATED)
def create_session(
    payload: SessionCreate,
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        mentoring_session = sessions.create_session(session, scope=scope, **payload.model_dump())
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": SessionRead.model_validate(mentoring_session)}


@router.put("/sessions/{session_id}", response_model=DataEnvelope[SessionRead])
def update_session(
    session_id: str,
    payload: SessionUpdate,
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        mentoring_session = sessions.update_session(
            session, scope=scope, session_id=session_id, changes=payload.model_dump(exclude_unset=True)
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": SessionRead.model_validate(mentoring_session)}


@router.delete("/sessions/{session_id}", response_model=DataEnvelope[SessionRead])
def cancel_session(
    session_id: str,
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        mentoring_session = sessions.cancel_session(session, scope=scope, session_id=session_id)
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": SessionRead.model_validate(mentoring_session)}


# Notes


@router.get("/sessions/{session_id}/notes", response_model=DataEnvelope[list[NoteRead]])
def list_notes(
    session_id: str,
    scope: Scope = Depends(get_mentoring_scope),
    user: AuthenticatedUser = Depends(mentoring_viewer),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        notes = sessions.list_notes(session, scope=scope, user=user, session_id=session_id)
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": [NoteRead.model_validate(note) for note in notes]}


@router.post(
    "/sessions/{session_id}/notes",
    response_model=DataEnvelope[NoteRead],
    status_code=status.HTTP_201_CREATED,
)
def create_note(
    session_id: str,
    payload: NoteCreate,
    scope: Scope = Depends(get_mentoring_scope),
    user: AuthenticatedUser = Depends(mentoring_viewer),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        note = sessions.create_note(
            session,
            scope=scope,
            user=user,
            session_id=session_id,
            content=payload.content,
            visibility=payload.visibility,
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": NoteRead.model_validate(note)}


# Prep


@router.get("/sessions/{session_id}/prep", response_model=DataEnvelope[PrepRead | None])
def get_prep(
    session_id: str,
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        record = prep.get_prep(session, scope=scope, session_id=session_id)
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": PrepRead.model_validate(record) if record is not None else None}


@router.post(
    "/sessions/{session_id}/prep",
    response_model=DataEnvelope[PrepRead],
    status_code=status.HTTP_201_CREATED,
)
def create_prep(
    session_id: str,
    payload: PrepCreate,
    scope: Scope = Depends(get_mentoring_scope),
    user: AuthenticatedUser = Depends(mentoring_viewer),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        record = prep.create_prep(session, scope=scope, user=user, session_id=session_id, **payload.model_dump())
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": PrepRead.model_validate(record)}


@router.put("/sessions/{session_id}/prep", response_model=DataEnvelope[PrepRead])
def update_prep(
    session_id: str,
    payload: PrepUpdate,
    scope: Scope = Depends(get_mentoring_scope),
    user: AuthenticatedUser = Depends(mentoring_viewer),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        record = prep.update_prep(
            session,
            scope=scope,
            user=user,
            session_id=session_id,
            changes=payload.model_dump(exclude_unset=True),
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": PrepRead.model_validate(record)}


# Action items


@router.get("/action-items", response_model=DataEnvelope[list[ActionItemRead]])
def list_action_items(
    item_status: ActionItemStatus | None = Query(default=None, alias="status"),
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    rows = action_items.list_action_items(session, scope=scope, status=item_status)
    return {"data": [ActionItemRead.model_validate(row) for row in rows]}


@router.post("/action-items", response_model=DataEnvelope[ActionItemRead], status_code=status.HTTP_201_CREATED)
def create_action_item(
    payload: ActionItemCreate,
    scope: Scope = Depends(get_mentoring_scope),
    user: AuthenticatedUser = Depends(mentoring_viewer),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        item = action_items.create_action_item(session, scope=scope, user=user, **payload.model_dump())
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": ActionItemRead.model_validate(item)}


@router.put("/action-items/{action_item_id}", response_model=DataEnvelope[ActionItemRead])
def update_action_item(
    action_item_id: str,
    payload: ActionItemUpdate,
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        item = action_items.update_action_item(
            session,
            scope=scope,
            action_item_id=action_item_id,
            changes=payload.model_dump(exclude_unset=True),
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": ActionItemRead.model_validate(item)}


# Stats


@router.get("/stats", response_model=DataEnvelope[MentoringStatsRead])
def get_stats(
    scope: Scope = Depends(get_mentoring_scope),
    session: Session = Depends(get_db_session),
) -> dict:
    result = stats.compute_stats(session, scope=scope)
    return {"data": MentoringStatsRead.model_validate(result)}


__all__ = ["router"]
