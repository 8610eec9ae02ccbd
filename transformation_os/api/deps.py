"""Common dependencies for API routes: database, principal, tenant and scope."""
from __future__ import annotations

from collections.abc import Callable, Iterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from transformation_os.core.config import Settings, get_settings
from transformation_os.core.permissions import Capability
from transformation_os.core.security import AuthenticatedUser
from transformation_os.core.tokens import TokenError, decode_token
from transformation_os.db.session import SessionLocal
from transformation_os.models import Tenant, User, UserStatus
from transformation_os.obs import record_access_denial
from transformation_os.services.errors import NotFoundError, TenantAccessError
from transformation_os.services.scope import Scope, resolve_scope
from transformation_os.services.tenants import ensure_tenant_access

security_scheme = HTTPBearer(auto_error=True)


def get_db_session() -> Iterator[Session]:
    """Yield a database session for FastAPI dependencies."""

    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedUser:
    try:
        payload = decode_token(credentials.credentials, settings=settings)
    except TokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    if payload.type != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")

    user = session.get(User, payload.sub)
    if user is None or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown or inactive user")

    request.state.actor_id = user.id
    return AuthenticatedUser.from_user(user)


def require_capability(*capabilities: Capability) -> Callable[..., AuthenticatedUser]:
    """Dependency factory admitting callers holding ANY of ``capabilities``."""

    def dependency(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not user.can(*capabilities):
            record_access_denial("missing_capability")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return dependency


def get_accessible_tenant(
    tenant_id: str,
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_db_session),
) -> Tenant:
    try:
        tenant = ensure_tenant_access(session, user=user, tenant_id=tenant_id)
    except TenantAccessError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    request.state.tenant_id = tenant.id
    return tenant


mentoring_viewer = require_capability(Capability.MENTORING_VIEW_ASSIGNED, Capability.MENTORING_VIEW_ALL)
mentoring_manager = require_capability(Capability.MENTORING_MANAGE)


def get_mentoring_scope(
    tenant: Tenant = Depends(get_accessible_tenant),
    user: AuthenticatedUser = Depends(mentoring_viewer),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> Scope:
    return resolve_scope(
        session,
        user=user,
        tenant_id=tenant.id,
        include_own_participation=settings.facilitator_includes_own_relationships,
    )


__all__ = [
    "get_accessible_tenant",
    "get_current_user",
    "get_db_session",
    "get_mentoring_scope",
    "mentoring_manager",
    "mentoring_viewer",
    "require_capability",
    "security_scheme",
]
