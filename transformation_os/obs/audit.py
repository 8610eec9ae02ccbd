"""Request audit trail: structured log lines plus a daily S3 archive."""
from __future__ import annotations

import json
import logging
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import boto3
from botocore.exceptions import ClientError
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from transformation_os.core.config import Settings

# Reflection and note text is personal; it never leaves the database.
_REDACTED_FIELDS = {
    "challenges",
    "content",
    "password",
    "questionsformentor",
    "questions_for_mentor",
    "refresh_token",
    "refreshtoken",
    "topicstodiscuss",
    "topics_to_discuss",
    "wins",
}
_REDACTED = "[redacted]"


def _mask_email(value: str) -> str:
    name, _, domain = value.partition("@")
    if not domain:
        return "***@***"
    return f"{name[:1]}***@{domain}"


def redact(value: Any) -> Any:
    """Recursively scrub personal fields from a decoded JSON payload."""
    if isinstance(value, dict):
        cleaned: dict[str, Any] = {}
        for key, item in value.items():
            if str(key).lower() in _REDACTED_FIELDS:
                cleaned[key] = _REDACTED
            elif str(key).lower() == "email" and isinstance(item, str):
                cleaned[key] = _mask_email(item)
            else:
                cleaned[key] = redact(item)
        return cleaned
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


@dataclass(slots=True)
class AuditLogRecord:
    """One audited request."""

    timestamp: str
    request_id: str
    method: str
    path: str
    status: int
    duration_ms: float
    actor_id: str | None
    tenant_id: str | None
    ip_address: str | None
    query: dict[str, Any]
    body: Any

    def to_json(self) -> str:
        payload = asdict(self)
        payload["duration_ms"] = round(self.duration_ms, 2)
        return json.dumps(payload, default=str)


class S3AuditArchive:
    """Appends audit records to one JSON-lines object per UTC day."""

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: Callable[[], Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or self._default_client
        self._logger = logger or logging.getLogger("audit")
        self._client: Any | None = None
        self._bucket_ready = False

    def reset(self) -> None:
        self._client = None
        self._bucket_ready = False

    def append(self, record: AuditLogRecord) -> None:
        rate = self._settings.audit_log_sample_rate
        if rate <= 0 or (rate < 1 and random.random() > rate):
            return
        try:
            client = self._get_client()
            self._ensure_bucket(client)
            key = self.daily_key()
            payload = self._read(client, key) + record.to_json().encode("utf-8") + b"\n"
            client.put_object(
                Bucket=self._settings.audit_log_bucket,
                Key=key,
                Body=payload,
                ContentType="application/json",
            )
        except Exception as exc:  # pragma: no cover - archive outages must not fail requests
            self._logger.error("failed to archive audit record", extra={"error": str(exc)})

    def daily_key(self, now: datetime | None = None) -> str:
        now = now or datetime.now(UTC)
        prefix = self._settings.audit_log_prefix.rstrip("/")
        return f"{prefix}/{now:%Y/%m/%d}/audit.log"

    def _default_client(self) -> Any:
        return boto3.client(
            "s3",
            region_name=self._settings.aws_region,
            endpoint_url=self._settings.s3_endpoint_url,
        )

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def _ensure_bucket(self, client: Any) -> None:
        if self._bucket_ready:
            return
        bucket = self._settings.audit_log_bucket
        try:
            client.head_bucket(Bucket=bucket)
        except ClientError:
            params: dict[str, Any] = {"Bucket": bucket}
            if self._settings.aws_region != "us-east-1" and self._settings.s3_endpoint_url is None:
                params["CreateBucketConfiguration"] = {"LocationConstraint": self._settings.aws_region}
            client.create_bucket(**params)
        self._bucket_ready = True

    def _read(self, client: Any, key: str) -> bytes:
        try:
            return client.get_object(Bucket=self._settings.audit_log_bucket, Key=key)["Body"].read()
        except client.exceptions.NoSuchKey:
            return b""
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"404", "NoSuchKey"}:
                return b""
            raise


class AuditMiddleware(BaseHTTPMiddleware):
    """Captures who did what to which tenant for every request."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        settings: Settings,
        archive: S3AuditArchive | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("audit")
        self.archive = archive or S3AuditArchive(settings, logger=self._logger)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        body_bytes = await request.body()
        body: Any = None
        if body_bytes:
            try:
                body = redact(json.loads(body_bytes))
            except json.JSONDecodeError:
                body = "<binary>"

        response = await call_next(request)

        record = AuditLogRecord(
            timestamp=datetime.now(UTC).isoformat(),
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=(time.perf_counter() - start) * 1000,
            actor_id=getattr(request.state, "actor_id", None),
            tenant_id=getattr(request.state, "tenant_id", None),
            ip_address=request.client.host if request.client else None,
            query=redact(dict(request.query_params.multi_items())),
            body=body,
        )
        self._logger.info(record.to_json())
        self.archive.append(record)

        response.headers["X-Request-ID"] = request_id
        return response


__all__ = ["AuditLogRecord", "AuditMiddleware", "S3AuditArchive", "redact"]
