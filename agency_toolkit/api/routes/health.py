from __future__ import annotations

from fastapi import APIRouter

from agency_toolkit.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and uptime monitors.

    Returns:
        dict: ``{"status": "ok", "environment": <APP_ENV>}``.
    """

    return {"status": "ok", "environment": settings.app_env}
