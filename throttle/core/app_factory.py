"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
rate limit registry) so tests can build isolated apps, each with its own
limiters and windows.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from throttle.api.routes import admin_router, contact_router, health_router, status_router
from throttle.core.config import settings
from throttle.core.exception_handlers import setup_exception_handlers
from throttle.core.logging import configure_logging
from throttle.core.middleware import request_id_middleware
from throttle.core.openapi import apply_openapi_customizations
from throttle.core.policies import PolicyRegistry, build_default_registry

logger = logging.getLogger(__name__)


def build_registry_from_settings() -> PolicyRegistry:
    return build_default_registry(
        reclaim_interval_seconds=settings.app.reclaim_interval_seconds,
        store_size_warning=settings.app.store_size_warning,
        trust_forwarded_for=settings.app.trust_forwarded_for,
    )


def create_app(registry: PolicyRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        registry: Named limiters to enforce. Defaults to the contact-form and
            general-api presets built from settings.

    Returns:
        Configured FastAPI app. Reclaimers start with the app's lifespan and
        stop when it shuts down.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    rate_limits = registry if registry is not None else build_registry_from_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        rate_limits.start_all()
        logger.info("rate_limit.reclaimers_started", extra={"policies": rate_limits.names()})
        try:
            yield
        finally:
            rate_limits.stop_all()
            logger.info("rate_limit.reclaimers_stopped", extra={"policies": rate_limits.names()})

    app = FastAPI(
        title="Throttle API",
        description=(
            "Contact form and general API endpoints protected by per-client "
            "fixed-window rate limits, with admin endpoints to inspect and "
            "reset throttling state."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.rate_limits = rate_limits

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(contact_router, prefix="/api")
    app.include_router(status_router, prefix="/api")
    app.include_router(admin_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
