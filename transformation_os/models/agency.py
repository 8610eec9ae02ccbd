"""Agency ORM model."""
from __future__ import annotations

import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class AgencyStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Agency(TimestampMixin, Base):
    """An organisation that owns and manages client tenants."""

    __tablename__ = "agencies"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    status: Mapped[AgencyStatus] = mapped_column(
        enum_type(AgencyStatus, "agency_status"), nullable=False, default=AgencyStatus.ACTIVE
    )

    tenants = relationship("Tenant", back_populates="agency")
    programs = relationship("Program", back_populates="agency")


__all__ = ["Agency", "AgencyStatus"]
