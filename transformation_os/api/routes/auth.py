"""Authentication endpoints for issuing JWTs."""
from __future__ import annotations

from datetime import timedelta
from threading import Lock

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from transformation_os.api.deps import get_current_user, get_db_session
from transformation_os.core.config import Settings, get_settings
from transformation_os.core.permissions import Capability
from transformation_os.core.security import AuthenticatedUser, verify_password
from transformation_os.core.tokens import TokenError, create_token, decode_token, load_signing_key
from transformation_os.models import User, UserStatus

router = APIRouter()


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginRequest(BaseModel):
    email: str
    password: str
    tenant_id: str | None = Field(default=None, description="Disambiguates an email used in several tenants")


class RefreshRequest(BaseModel):
    refresh_token: str


class PrincipalResponse(BaseModel):
    id: str
    email: str
    tenant_id: str | None
    agency_id: str | None
    role: str
    role_level: int
    capabilities: list[str]


class RefreshTokenStore:
    """In-memory store tracking active and blacklisted refresh tokens."""

    def __init__(self) -> None:
        self._active: dict[str, str] = {}
        self._blacklist: set[str] = set()
        self._lock = Lock()

    def mark_active(self, subject: str, token_id: str) -> None:
        with self._lock:
            self._active[subject] = token_id

    def is_active(self, subject: str, token_id: str) -> bool:
        with self._lock:
            if token_id in self._blacklist:
                return False
            return self._active.get(subject) == token_id

    def blacklist(self, token_id: str) -> None:
        with self._lock:
            self._blacklist.add(token_id)

    def reset(self) -> None:
        with self._lock:
            self._active.clear()
            self._blacklist.clear()


refresh_token_store = RefreshTokenStore()


def _issue_tokens(user: User, settings: Settings) -> tuple[TokenResponse, str]:
    try:
        signing_key = load_signing_key(settings)
    except TokenError as exc:  # pragma: no cover - configuration issue
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    claims = {
        "subject": user.id,
        "tenant_id": user.tenant_id,
        "agency_id": user.agency_id,
        "role_level": user.role_level,
        "settings": settings,
        "signing_key": signing_key,
    }
    access_token, _ = create_token(
        token_type="access",
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        **claims,
    )
    refresh_token, refresh_id = create_token(
        token_type="refresh",
        expires_delta=timedelta(days=settings.refresh_token_expire_days),
        **claims,
    )
    response = TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )
    return response, refresh_id


def _find_login_user(session: Session, request: LoginRequest) -> User | None:
    statement = select(User).where(User.email == request.email.strip().lower())
    if request.tenant_id is not None:
        statement = statement.where(User.tenant_id == request.tenant_id)
    candidates = list(session.scalars(statement))
    if len(candidates) > 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is registered in several tenants; supply tenant_id",
        )
    return candidates[0] if candidates else None


@router.post("/login", response_model=TokenResponse, summary="Issue JWT access tokens")
def login(
    request: LoginRequest,
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    if "@" not in request.email:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid email address")

    user = _find_login_user(session, request)
    if (
        user is None
        or user.status != UserStatus.ACTIVE
        or not verify_password(request.password, user.hashed_password)
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    response, refresh_id = _issue_tokens(user, settings)
    refresh_token_store.mark_active(user.id, refresh_id)
    return response


@router.post("/refresh", response_model=TokenResponse, summary="Rotate JWT refresh tokens")
def refresh_token(
    request: RefreshRequest,
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    try:
        payload = decode_token(request.refresh_token, settings=settings)
    except TokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    if payload.type != "refresh":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token type")
    if not refresh_token_store.is_active(payload.sub, payload.jti):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token revoked")

    user = session.get(User, payload.sub)
    if user is None or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown or inactive user")

    refresh_token_store.blacklist(payload.jti)
    response, refresh_id = _issue_tokens(user, settings)
    refresh_token_store.mark_active(user.id, refresh_id)
    return response


@router.get("/me", response_model=PrincipalResponse, summary="Describe the authenticated caller")
def who_am_i(user: AuthenticatedUser = Depends(get_current_user)) -> PrincipalResponse:
    return PrincipalResponse(
        id=user.id,
        email=user.email,
        tenant_id=user.tenant_id,
        agency_id=user.agency_id,
        role=user.role.value,
        role_level=int(user.role_level),
        capabilities=sorted(member.name for member in Capability if member in user.capabilities),
    )


__all__ = ["RefreshTokenStore", "login", "refresh_token", "refresh_token_store", "router", "who_am_i"]
