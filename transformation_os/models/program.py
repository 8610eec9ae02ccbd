"""Program ORM model."""
from __future__ import annotations

import enum

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class ProgramStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class Program(TimestampMixin, Base):
    """A learning program owned by an agency and optionally a single tenant.

    ``tenant_id`` of ``None`` marks an agency-wide program. Other tenants can be
    granted visibility through ``allowed_tenant_ids``.
    """

    __tablename__ = "programs"
    __table_args__ = (
        Index("ix_programs_tenant_id", "tenant_id"),
        Index("ix_programs_agency_id", "agency_id"),
    )

    id: Mapped[str] = id_column()
    agency_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True
    )
    allowed_tenant_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[ProgramStatus] = mapped_column(
        enum_type(ProgramStatus, "program_status"), nullable=False, default=ProgramStatus.DRAFT
    )

    agency = relationship("Agency", back_populates="programs")
    enrollments = relationship("Enrollment", back_populates="program", cascade="all, delete-orphan")


__all__ = ["Program", "ProgramStatus"]
