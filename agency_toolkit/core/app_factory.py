"""Application factory for the FastAPI app.

Builds the app (metadata, middleware, handlers, routers) in one place so
tests can create isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agency_toolkit import __version__
from agency_toolkit.api.routes import (
    customers_router,
    health_router,
    notifications_router,
    photos_router,
)
from agency_toolkit.core.config import settings
from agency_toolkit.core.exception_handlers import setup_exception_handlers
from agency_toolkit.core.logging import configure_logging
from agency_toolkit.core.middleware import request_id_middleware
from agency_toolkit.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Agency Toolkit API",
        description=(
            "Multi-tenant API for agencies: customer sub-accounts, in-app "
            "notifications and photo uploads from embedded pages. Dashboard "
            "endpoints require X-API-Key; embed endpoints use the agency token."
        ),
        version=__version__,
        debug=settings.app.debug,
    )

    # Embed endpoints are called from third-party pages
    origins = [o.strip() for o in settings.app.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key", settings.log.request_id_header],
    )
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(customers_router, prefix="/v1")
    app.include_router(notifications_router, prefix="/v1")
    app.include_router(photos_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
