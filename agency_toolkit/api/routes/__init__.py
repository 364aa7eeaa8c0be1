from __future__ import annotations

from agency_toolkit.api.routes.customers import router as customers_router
from agency_toolkit.api.routes.health import router as health_router
from agency_toolkit.api.routes.notifications import router as notifications_router
from agency_toolkit.api.routes.photos import router as photos_router

__all__ = ["customers_router", "health_router", "notifications_router", "photos_router"]
