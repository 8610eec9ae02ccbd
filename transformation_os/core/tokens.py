"""RS256 access and refresh tokens."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Literal
from uuid import uuid4

from cryptography.hazmat.primitives import serialization
from jose import JWTError, jwt  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from transformation_os.core.config import Settings

TokenType = Literal["access", "refresh"]


class TokenError(RuntimeError):
    """Raised when a token cannot be decoded or fails validation."""


class TokenPayload(BaseModel):
    sub: str
    tid: str | None = None
    aid: str | None = None
    lvl: int
    type: TokenType
    iat: datetime
    exp: datetime
    jti: str


def load_signing_key(settings: Settings) -> Any:
    try:
        return serialization.load_pem_private_key(settings.jwt_private_key.encode("utf-8"), password=None)
    except ValueError as exc:  # pragma: no cover - configuration issue
        raise TokenError("Invalid JWT signing key") from exc


@lru_cache(maxsize=4)
def _verification_key(private_pem: str) -> str:
    private_key = serialization.load_pem_private_key(private_pem.encode("utf-8"), password=None)
    return (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("utf-8")
    )


def create_token(
    *,
    subject: str,
    tenant_id: str | None,
    agency_id: str | None,
    role_level: int,
    token_type: TokenType,
    expires_delta: timedelta,
    settings: Settings,
    signing_key: Any,
) -> tuple[str, str]:
    """Encode a token and return it together with its ``jti``."""

    now = datetime.now(UTC)
    token_id = uuid4().hex
    payload = {
        "sub": subject,
        "tid": tenant_id,
        "aid": agency_id,
        "lvl": int(role_level),
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "jti": token_id,
    }
    return jwt.encode(payload, signing_key, algorithm=settings.jwt_algorithm), token_id


def decode_token(token: str, *, settings: Settings) -> TokenPayload:
    try:
        payload = jwt.decode(
            token, _verification_key(settings.jwt_private_key), algorithms=[settings.jwt_algorithm]
        )
    except (JWTError, ValueError) as exc:
        raise TokenError("Invalid token") from exc
    try:
        return TokenPayload(**payload)
    except ValidationError as exc:
        raise TokenError("Invalid token") from exc


__all__ = ["TokenError", "TokenPayload", "TokenType", "create_token", "decode_token", "load_signing_key"]
