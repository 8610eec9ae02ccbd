"""Program enrollment ORM model."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column, utcnow


class EnrollmentRole(str, enum.Enum):
    LEARNER = "learner"
    MENTOR = "mentor"
    FACILITATOR = "facilitator"


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"


class Enrollment(TimestampMixin, Base):
    """A user's role within a program. ``tenant_id`` is the user's home tenant."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("program_id", "user_id", name="uq_enrollments_program_user"),
        Index("ix_enrollments_tenant_id", "tenant_id"),
        Index("ix_enrollments_user_id", "user_id"),
    )

    id: Mapped[str] = id_column()
    program_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True
    )
    role: Mapped[EnrollmentRole] = mapped_column(
        enum_type(EnrollmentRole, "enrollment_role"), nullable=False, default=EnrollmentRole.LEARNER
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        enum_type(EnrollmentStatus, "enrollment_status"), nullable=False, default=EnrollmentStatus.ACTIVE
    )
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    program = relationship("Program", back_populates="enrollments")
    user = relationship("User")


__all__ = ["Enrollment", "EnrollmentRole", "EnrollmentStatus"]
