"""Observability utilities."""

from .audit import AuditLogRecord, AuditMiddleware, S3AuditArchive, redact
from .metrics import (
    ACCESS_DENIAL_COUNTER,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    SCOPE_RESOLUTION_COUNTER,
    PrometheusMiddleware,
    metrics_router,
    record_access_denial,
    record_scope_resolution,
)
from .tracing import (
    access_span,
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
)

__all__ = [
    "ACCESS_DENIAL_COUNTER",
    "AuditLogRecord",
    "AuditMiddleware",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "S3AuditArchive",
    "SCOPE_RESOLUTION_COUNTER",
    "access_span",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "metrics_router",
    "record_access_denial",
    "record_scope_resolution",
    "redact",
]
