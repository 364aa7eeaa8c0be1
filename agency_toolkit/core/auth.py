"""Tenant resolution for dashboard and embed endpoints.

Dashboard calls carry the agency's secret in ``X-API-Key``; embed calls from
third-party pages carry the agency's public token in the form body. Either
way the request resolves to exactly one ``Agency`` or fails with 401.

Usage:
    @router.get("/customers")
    async def list_customers(agency: Annotated[Agency, Depends(get_current_agency)]):
        ...
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Depends, Header

from agency_toolkit.adapters.storage.base import AbstractAgencyStore
from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import AuthenticationAppError
from agency_toolkit.core.stores import get_agency_store
from agency_toolkit.schemas.agency import Agency

logger = logging.getLogger(__name__)


def _fingerprint(secret: str) -> str:
    return hashlib.sha256(secret.encode()).hexdigest()[:16]


def _unauthorized(reason: str) -> AuthenticationAppError:
    return AuthenticationAppError(code=reason, message="Unauthorized")


def resolve_agency(api_key: str | None, store: AbstractAgencyStore) -> Agency:
    """Resolve the calling agency from its API key.

    Pure lookup logic without FastAPI dependencies for easy testing.

    Args:
        api_key: Value of the ``X-API-Key`` header, if any.
        store: Agency store to look the key up in.

    Returns:
        The agency owning ``api_key``.

    Raises:
        AuthenticationAppError: If the key is missing or unknown, or auth is
            disabled without a resolvable default agency.
    """
    if not settings.app.api_key_required:
        agency_id = settings.app.default_agency_id
        agency = store.get(agency_id) if agency_id else None
        if agency is None:
            logger.error(
                "auth.default_agency_missing",
                extra={"default_agency_id": agency_id},
            )
            raise _unauthorized("default_agency_not_configured")
        logger.debug("auth.skipped", extra={"reason": "auth_required_false", "agency_id": agency.id})
        return agency

    if not api_key:
        logger.warning("auth.missing_key", extra={"api_key_present": False})
        raise _unauthorized("missing_api_key")

    agency = store.get_by_api_key(api_key)
    if agency is None:
        logger.warning(
            "auth.invalid_key",
            extra={"api_key_hash": _fingerprint(api_key)},
        )
        raise _unauthorized("invalid_api_key")

    logger.info("auth.success", extra={"agency_id": agency.id, "api_key_hash": _fingerprint(api_key)})
    return agency


def resolve_agency_by_token(token: str, store: AbstractAgencyStore) -> Agency:
    """Resolve an agency from the public token used by embedded pages.

    Raises:
        AuthenticationAppError: If no agency owns ``token``.
    """
    agency = store.get_by_token(token)
    if agency is None:
        logger.warning("auth.invalid_token", extra={"token_hash": _fingerprint(token)})
        raise AuthenticationAppError(code="invalid_token", message="Invalid agency token")
    return agency


async def get_current_agency(
    store: Annotated[AbstractAgencyStore, Depends(get_agency_store)],
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> Agency:
    """FastAPI dependency returning the authenticated agency (401 otherwise)."""
    return resolve_agency(x_api_key, store)
