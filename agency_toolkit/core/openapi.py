"""OpenAPI schema customizations.

Adds the ``X-API-Key`` security scheme, requires it on dashboard operations
and exempts the public endpoints (health checks and embed calls, which
authenticate by the agency token in the request body).
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

PUBLIC_PATH_SUFFIXES = ("/health", "/photos/upload")

TAGS_METADATA = [
    {"name": "Customers", "description": "Customer sub-accounts of the calling agency."},
    {"name": "Notifications", "description": "In-app notifications for the calling agency."},
    {"name": "Photos", "description": "Uploaded photos of the calling agency's customers."},
    {"name": "Embed", "description": "Endpoints called by scripts embedded on customer pages."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Wrap ``app.openapi`` to inject security and tag metadata."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Agency API key from the dashboard settings.",
            },
        )
        schema.setdefault("security", [{"ApiKeyAuth": []}])

        tags = schema.setdefault("tags", [])
        known = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in known)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith(PUBLIC_PATH_SUFFIXES):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
