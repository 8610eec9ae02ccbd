"""Tenant access and program visibility rules."""
from __future__ import annotations

import logging

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from transformation_os.core.security import AuthenticatedUser
from transformation_os.models import Program, Tenant
from transformation_os.obs import record_access_denial
from transformation_os.services.errors import NotFoundError, TenantAccessError

logger = logging.getLogger(__name__)


def ensure_tenant_access(session: Session, *, user: AuthenticatedUser, tenant_id: str) -> Tenant:
    """Return the tenant addressed by the request if the caller may act inside it.

    Agency staff reach every tenant owned by their agency; a tenant owned by
    another agency is reported as missing. Tenant users only reach their own
    tenant.
    """

    if user.is_agency_user:
        tenant = session.get(Tenant, tenant_id)
        if tenant is None or tenant.agency_id != user.agency_id:
            record_access_denial("tenant_not_in_agency")
            raise NotFoundError(f"Tenant '{tenant_id}' was not found")
        return tenant

    if user.tenant_id != tenant_id:
        record_access_denial("foreign_tenant")
        logger.info("Denied tenant access", extra={"user_id": user.id, "tenant_id": tenant_id})
        raise TenantAccessError("Access denied to this tenant")

    tenant = session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError(f"Tenant '{tenant_id}' was not found")
    return tenant


def program_access_clause(tenant_id: str, agency_id: str | None = None) -> ColumnElement[bool]:
    """SQL condition selecting the programs visible to a tenant.

    A program is visible when the tenant owns it, when the tenant is listed in
    ``allowed_tenant_ids`` or when it is an agency-wide program of the tenant's
    agency.
    """

    conditions = [
        Program.tenant_id == tenant_id,
        # JSON arrays are stored as text on every supported backend.
        cast(Program.allowed_tenant_ids, String).contains(f'"{tenant_id}"'),
    ]
    if agency_id:
        conditions.append((Program.agency_id == agency_id) & Program.tenant_id.is_(None))
    return or_(*conditions)


def program_visible_to(program: Program, tenant: Tenant) -> bool:
    if program.tenant_id == tenant.id or tenant.id in (program.allowed_tenant_ids or []):
        return True
    return program.tenant_id is None and tenant.agency_id is not None and program.agency_id == tenant.agency_id


__all__ = ["ensure_tenant_access", "program_access_clause", "program_visible_to"]
