"""Principal type and password hashing."""
from __future__ import annotations

from dataclasses import dataclass

import bcrypt

from transformation_os.core.permissions import Capability, RoleLevel, SystemRole, has_any, role_definition


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    """The caller of a request, passed explicitly into every service call."""

    id: str
    email: str
    tenant_id: str | None
    agency_id: str | None
    role: SystemRole

    @property
    def role_level(self) -> RoleLevel:
        return role_definition(self.role).level

    @property
    def capabilities(self) -> Capability:
        return role_definition(self.role).capabilities

    @property
    def is_agency_user(self) -> bool:
        return self.agency_id is not None

    def can(self, *required: Capability) -> bool:
        return has_any(self.capabilities, *required)

    @classmethod
    def from_user(cls, user) -> AuthenticatedUser:
        return cls(
            id=user.id,
            email=user.email,
            tenant_id=user.tenant_id,
            agency_id=user.agency_id,
            role=user.role,
        )


def hash_password(raw_password: str) -> str:
    return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(raw_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:  # pragma: no cover - invalid hash format
        return False


__all__ = ["AuthenticatedUser", "hash_password", "verify_password"]
