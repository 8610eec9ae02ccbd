"""Schemas for programs and enrollments."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from transformation_os.models import EnrollmentRole, EnrollmentStatus, ProgramStatus
from transformation_os.schemas.common import CamelModel, PaginationMeta, UserSummary


class ProgramRead(CamelModel):
    id: str
    agency_id: str
    tenant_id: str | None
    allowed_tenant_ids: list[str]
    name: str
    status: ProgramStatus


class EnrollmentCreate(CamelModel):
    """Payload for enrolling a user, possibly from another tenant, in a program."""

    user_id: str = Field(..., description="User to enroll")
    role: EnrollmentRole = Field(default=EnrollmentRole.LEARNER)


class EnrollmentRead(CamelModel):
    id: str
    program_id: str
    user_id: str
    tenant_id: str | None
    role: EnrollmentRole
    status: EnrollmentStatus
    enrolled_at: datetime
    user: UserSummary | None = None


class EnrollmentListMeta(CamelModel):
    pagination: PaginationMeta


class EnrollmentListResponse(CamelModel):
    data: list[EnrollmentRead]
    meta: EnrollmentListMeta


__all__ = [
    "EnrollmentCreate",
    "EnrollmentListMeta",
    "EnrollmentListResponse",
    "EnrollmentRead",
    "ProgramRead",
]
