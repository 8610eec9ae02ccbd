"""Tenant ORM model."""
from __future__ import annotations

import enum

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class TenantStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class Tenant(TimestampMixin, Base):
    """A client organisation, optionally owned by an agency."""

    __tablename__ = "tenants"
    __table_args__ = (
        UniqueConstraint("agency_id", "slug", name="uq_tenants_agency_slug"),
        Index("ix_tenants_agency_id", "agency_id"),
    )

    id: Mapped[str] = id_column()
    # Fixed at creation; ownership transfers are not supported.
    agency_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("agencies.id", ondelete="RESTRICT"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[TenantStatus] = mapped_column(
        enum_type(TenantStatus, "tenant_status"), nullable=False, default=TenantStatus.ACTIVE
    )

    agency = relationship("Agency", back_populates="tenants")
    users = relationship("User", back_populates="tenant")
    mentoring_relationships = relationship("MentoringRelationship", back_populates="tenant")


__all__ = ["Tenant", "TenantStatus"]
