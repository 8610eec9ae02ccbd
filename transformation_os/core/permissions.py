"""Capabilities, system roles and role levels.

Capabilities are modelled as an :class:`enum.Flag` so a role's grant set is a
single value and membership checks are bitwise rather than string lookups.
Role levels order roles by authority: a higher level always implies at least
as much administrative reach as a lower one.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass


class Capability(enum.Flag):
    TENANT_VIEW = enum.auto()
    TENANT_MANAGE = enum.auto()
    AGENCY_MANAGE_CLIENTS = enum.auto()
    USERS_VIEW = enum.auto()
    USERS_MANAGE = enum.auto()
    PROGRAMS_VIEW = enum.auto()
    PROGRAMS_MANAGE = enum.auto()
    PROGRAMS_ENROLL = enum.auto()
    MENTORING_VIEW_ASSIGNED = enum.auto()
    MENTORING_VIEW_ALL = enum.auto()
    MENTORING_MANAGE = enum.auto()


NO_CAPABILITIES = Capability(0)
ALL_CAPABILITIES = Capability(sum(member.value for member in Capability))


class RoleLevel(enum.IntEnum):
    AGENCY_OWNER = 100
    AGENCY_ADMIN = 90
    TENANT_ADMIN = 70
    FACILITATOR = 50
    MENTOR = 30
    LEARNER = 10


# Record-level administrative override (prep on behalf of a mentee, notes on
# sessions the caller does not participate in).
ADMIN_OVERRIDE_LEVEL = RoleLevel.TENANT_ADMIN


class SystemRole(str, enum.Enum):
    AGENCY_OWNER = "agency_owner"
    AGENCY_ADMIN = "agency_admin"
    TENANT_ADMIN = "tenant_admin"
    FACILITATOR = "facilitator"
    MENTOR = "mentor"
    LEARNER = "learner"


@dataclass(frozen=True, slots=True)
class RoleDefinition:
    name: str
    level: RoleLevel
    capabilities: Capability
    is_agency_role: bool = False


SYSTEM_ROLES: dict[SystemRole, RoleDefinition] = {
    SystemRole.AGENCY_OWNER: RoleDefinition(
        name="Agency Owner",
        level=RoleLevel.AGENCY_OWNER,
        capabilities=ALL_CAPABILITIES,
        is_agency_role=True,
    ),
    SystemRole.AGENCY_ADMIN: RoleDefinition(
        name="Agency Admin",
        level=RoleLevel.AGENCY_ADMIN,
        capabilities=(
            Capability.AGENCY_MANAGE_CLIENTS
            | Capability.TENANT_VIEW
            | Capability.USERS_VIEW
            | Capability.PROGRAMS_VIEW
            | Capability.MENTORING_VIEW_ALL
        ),
        is_agency_role=True,
    ),
    SystemRole.TENANT_ADMIN: RoleDefinition(
        name="Client Admin",
        level=RoleLevel.TENANT_ADMIN,
        capabilities=(
            Capability.TENANT_VIEW
            | Capability.TENANT_MANAGE
            | Capability.USERS_VIEW
            | Capability.USERS_MANAGE
            | Capability.PROGRAMS_VIEW
            | Capability.PROGRAMS_MANAGE
            | Capability.PROGRAMS_ENROLL
            | Capability.MENTORING_VIEW_ALL
            | Capability.MENTORING_MANAGE
        ),
    ),
    SystemRole.FACILITATOR: RoleDefinition(
        name="Facilitator",
        level=RoleLevel.FACILITATOR,
        capabilities=(
            Capability.TENANT_VIEW
            | Capability.USERS_VIEW
            | Capability.PROGRAMS_VIEW
            | Capability.PROGRAMS_MANAGE
            | Capability.PROGRAMS_ENROLL
            | Capability.MENTORING_VIEW_ALL
        ),
    ),
    SystemRole.MENTOR: RoleDefinition(
        name="Mentor",
        level=RoleLevel.MENTOR,
        capabilities=Capability.TENANT_VIEW | Capability.PROGRAMS_VIEW | Capability.MENTORING_VIEW_ASSIGNED,
    ),
    SystemRole.LEARNER: RoleDefinition(
        name="Learner",
        level=RoleLevel.LEARNER,
        capabilities=Capability.TENANT_VIEW | Capability.PROGRAMS_VIEW | Capability.MENTORING_VIEW_ASSIGNED,
    ),
}


def role_definition(role: SystemRole) -> RoleDefinition:
    return SYSTEM_ROLES[role]


def has_any(granted: Capability, *required: Capability) -> bool:
    """Return True when ``granted`` holds at least one of ``required``."""
    return any(capability in granted for capability in required)


__all__ = [
    "ADMIN_OVERRIDE_LEVEL",
    "ALL_CAPABILITIES",
    "Capability",
    "NO_CAPABILITIES",
    "RoleDefinition",
    "RoleLevel",
    "SYSTEM_ROLES",
    "SystemRole",
    "has_any",
    "role_definition",
]
