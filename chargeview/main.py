"""FastAPI application entrypoint."""
from __future__ import annotations

from fastapi import FastAPI

from chargeview.api.routes import register_routes
from chargeview.core.config import Settings, get_settings
from chargeview.core.logging import configure_logging
from chargeview.obs import (
    PrometheusMiddleware,
    initialise_tracing,
    instrument_fastapi_app,
    metrics_router,
)


def create_application(settings: Settings | None = None) -> FastAPI:
    """Application factory used by ASGI servers and tests."""
    settings = settings or get_settings()
    configure_logging(settings.log_config_path, level=settings.log_level)

    if settings.enable_tracing:
        initialise_tracing(
            service_name=settings.app_name,
            version=settings.version,
            endpoint=settings.otel_exporter_endpoint,
            sample_ratio=settings.otel_sample_ratio,
        )

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Read-only reporting over charging transactions and their meter values.",
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
    )

    if settings.enable_metrics:
        application.add_middleware(PrometheusMiddleware)
        application.include_router(metrics_router)
    register_routes(application)

    if settings.enable_tracing:
        instrument_fastapi_app(application)

    return application


app = create_application()
