"""Pydantic schemas package."""

from .common import CamelModel, DataEnvelope, PaginationMeta, UserSummary
from .mentoring import (
    ActionItemCreate,
    ActionItemRead,
    ActionItemUpdate,
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
from .programs import (
    EnrollmentCreate,
    EnrollmentListMeta,
    EnrollmentListResponse,
    EnrollmentRead,
    ProgramRead,
)

__all__ = [
    "ActionItemCreate",
    "ActionItemRead",
    "ActionItemUpdate",
    "CamelModel",
    "DataEnvelope",
    "EnrollmentCreate",
    "EnrollmentListMeta",
    "EnrollmentListResponse",
    "EnrollmentRead",
    "MentoringStatsRead",
    "NoteCreate",
    "NoteRead",
    "PaginationMeta",
    "PrepCreate",
    "PrepRead",
    "PrepUpdate",
    "ProgramRead",
    "RelationshipCreate",
    "RelationshipRead",
    "SessionCreate",
    "SessionRead",
    "SessionUpdate",
    "UserSummary",
]
