"""Program visibility and enrollment endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from transformation_os.api.deps import get_accessible_tenant, get_db_session, require_capability
from transformation_os.api.errors import http_error
from transformation_os.core.permissions import Capability
from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import EnrollmentRole, EnrollmentStatus, Tenant
from transformation_os.schemas import (
    DataEnvelope,
    EnrollmentCreate,
    EnrollmentListMeta,
    EnrollmentListResponse,
    EnrollmentRead,
    PaginationMeta,
    ProgramRead,
)
from transformation_os.services.errors import MentoringError
from transformation_os.services.programs import enroll_user, list_enrollments, list_programs

router = APIRouter(prefix="/tenants/{tenant_id}/programs")

program_viewer = require_capability(Capability.PROGRAMS_VIEW)
program_enroller = require_capability(Capability.PROGRAMS_ENROLL)


@router.get("", response_model=DataEnvelope[list[ProgramRead]])
def get_programs(
    tenant: Tenant = Depends(get_accessible_tenant),
    _: AuthenticatedUser = Depends(program_viewer),
    session: Session = Depends(get_db_session),
) -> dict:
    """List programs owned by, shared with, or agency-wide for the tenant."""

    programs = list_programs(session, tenant=tenant)
    return {"data": [ProgramRead.model_validate(program) for program in programs]}


@router.get("/{program_id}/enrollments", response_model=EnrollmentListResponse)
def get_enrollments(
    program_id: str,
    role: EnrollmentRole | None = None,
    enrollment_status: EnrollmentStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    tenant: Tenant = Depends(get_accessible_tenant),
    user: AuthenticatedUser = Depends(program_viewer),
    session: Session = Depends(get_db_session),
) -> EnrollmentListResponse:
    try:
        result = list_enrollments(
            session,
            user=user,
            tenant=tenant,
            program_id=program_id,
            role=role,
            status=enrollment_status,
            page=page,
            limit=limit,
        )
    except MentoringError as exc:
        raise http_error(exc) from exc

    pagination = PaginationMeta(
        page=result.page,
        limit=result.limit,
        total=result.total,
        total_pages=result.total_pages,
        has_next=result.page * result.limit < result.total,
        has_prev=result.page > 1,
    )
    return EnrollmentListResponse(
        data=[EnrollmentRead.model_validate(enrollment) for enrollment in result.items],
        meta=EnrollmentListMeta(pagination=pagination),
    )


@router.post(
    "/{program_id}/enrollments",
    response_model=DataEnvelope[EnrollmentRead],
    status_code=status.HTTP_201_CREATED,
)
def create_enrollment(
    program_id: str,
    payload: EnrollmentCreate,
    tenant: Tenant = Depends(get_accessible_tenant),
    _: AuthenticatedUser = Depends(program_enroller),
    session: Session = Depends(get_db_session),
) -> dict:
    try:
        enrollment = enroll_user(
            session,
            tenant=tenant,
            program_id=program_id,
            user_id=payload.user_id,
            role=payload.role,
        )
    except MentoringError as exc:
        raise http_error(exc) from exc
    return {"data": EnrollmentRead.model_validate(enrollment)}


__all__ = ["create_enrollment", "get_enrollments", "get_programs", "router"]
