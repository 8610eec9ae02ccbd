"""ORM models package."""
from .action_item import ActionItem, ActionItemPriority, ActionItemStatus
from .agency import Agency, AgencyStatus
from .base import Base, TimestampMixin
from .enrollment import Enrollment, EnrollmentRole, EnrollmentStatus
from .mentoring_relationship import MentoringRelationship, RelationshipStatus, RelationshipType
from .mentoring_session import MentoringSession, SessionStatus, SessionType
from .program import Program, ProgramStatus
from .session_note import NoteVisibility, SessionNote
from .session_prep import SessionPrep
from .tenant import Tenant, TenantStatus
from .user import User, UserStatus

__all__ = [
    "ActionItem",
    "ActionItemPriority",
    "ActionItemStatus",
    "Agency",
    "AgencyStatus",
    "Base",
    "Enrollment",
    "EnrollmentRole",
    "EnrollmentStatus",
    "MentoringRelationship",
    "MentoringSession",
    "NoteVisibility",
    "Program",
    "ProgramStatus",
    "RelationshipStatus",
    "RelationshipType",
    "SessionNote",
    "SessionPrep",
    "SessionStatus",
    "SessionType",
    "Tenant",
    "TenantStatus",
    "TimestampMixin",
    "User",
    "UserStatus",
]
