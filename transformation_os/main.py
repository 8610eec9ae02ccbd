"""FastAPI application entrypoint."""
from __future__ import annotations

import logging

from fastapi import FastAPI

from transformation_os.api.routes import register_routes
from transformation_os.core.config import Settings, get_settings
from transformation_os.core.logging import configure_logging
from transformation_os.obs import (
    AuditMiddleware,
    PrometheusMiddleware,
    initialise_tracing,
    instrument_fastapi_app,
    metrics_router,
)

logger = logging.getLogger(__name__)


def create_application(settings: Settings | None = None) -> FastAPI:
    """Application factory used by ASGI servers and tests.

    Explicit ``settings`` also replace the ``get_settings`` dependency so that
    routes and the scope resolver see the same configuration as the factory.
    """
    configure_logging()
    explicit_settings = settings is not None
    settings = settings or get_settings()

    if settings.enable_tracing:
        initialise_tracing(service_name=settings.app_name, endpoint=settings.otel_exporter_endpoint)

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
    )
    application.state.settings = settings
    if explicit_settings:
        application.dependency_overrides[get_settings] = lambda: settings

    application.add_middleware(AuditMiddleware, settings=settings)
    if settings.enable_metrics:
        application.add_middleware(PrometheusMiddleware)
        application.include_router(metrics_router)
    register_routes(application)

    if settings.enable_tracing:
        instrument_fastapi_app(application)

    logger.info(
        "Application configured",
        extra={
            "metrics": settings.enable_metrics,
            "tracing": settings.enable_tracing,
            "facilitator_includes_own_relationships": settings.facilitator_includes_own_relationships,
        },
    )
    return application


app = create_application()
