"""User ORM model."""
from __future__ import annotations

import enum

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transformation_os.core.permissions import Capability, RoleLevel, SystemRole, role_definition
from transformation_os.models.base import Base, TimestampMixin, enum_type, id_column


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INVITED = "invited"
    DISABLED = "disabled"


class User(TimestampMixin, Base):
    """A person belonging to a tenant, or to an agency for agency staff."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
        Index("ix_users_tenant_id", "tenant_id"),
        Index("ix_users_agency_id", "agency_id"),
    )

    id: Mapped[str] = id_column()
    tenant_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="RESTRICT"), nullable=True
    )
    agency_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("agencies.id", ondelete="RESTRICT"), nullable=True
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str | None] = mapped_column(String(200))
    role: Mapped[SystemRole] = mapped_column(enum_type(SystemRole, "system_role"), nullable=False)
    status: Mapped[UserStatus] = mapped_column(
        enum_type(UserStatus, "user_status"), nullable=False, default=UserStatus.ACTIVE
    )

    tenant = relationship("Tenant", back_populates="users")

    @property
    def role_level(self) -> RoleLevel:
        return role_definition(self.role).level

    @property
    def capabilities(self) -> Capability:
        return role_definition(self.role).capabilities


__all__ = ["User", "UserStatus"]
