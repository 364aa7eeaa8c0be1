"""Process-wide store instances and their FastAPI dependency getters.

Routes receive stores through ``Depends(get_customer_store)`` and friends, so
tests can swap them with ``app.dependency_overrides`` or ``reset_stores``.
"""

from __future__ import annotations

import logging

from agency_toolkit.adapters.storage.base import (
    AbstractAgencyStore,
    AbstractBlobStorage,
    AbstractCustomerStore,
    AbstractNotificationStore,
    AbstractPhotoStore,
)
from agency_toolkit.adapters.storage.in_memory import (
    InMemoryAgencyStore,
    InMemoryBlobStorage,
    InMemoryCustomerStore,
    InMemoryNotificationStore,
    InMemoryPhotoStore,
)
from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import ValidationAppError
from agency_toolkit.schemas.agency import Agency

logger = logging.getLogger(__name__)


def parse_seed_agencies(seed: str | None) -> list[Agency]:
    """Parse ``id:name:api_key:token[:plan]`` entries separated by commas.

    Examples:
        >>> [a.id for a in parse_seed_agencies("a1:Acme:key1:ac_tok:pro")]
        ['a1']
        >>> parse_seed_agencies(None)
        []

    Raises:
        ValidationAppError: If an entry has fewer than four fields.
    """
    if not seed:
        return []

    agencies: list[Agency] = []
    for entry in (e.strip() for e in seed.split(",")):
        if not entry:
            continue
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) < 4:
            raise ValidationAppError(
                code="invalid_seed_agency",
                message="Seed agencies must be formatted as id:name:api_key:token[:plan]",
                details={"hint": "Check APP_SEED_AGENCIES"},
            )
        agency_id, name, api_key, token = parts[:4]
        plan = parts[4] if len(parts) > 4 and parts[4] else "free"
        agencies.append(Agency(id=agency_id, name=name, api_key=api_key, token=token, plan=plan))
    return agencies


_agency_store: AbstractAgencyStore | None = None
_customer_store: AbstractCustomerStore | None = None
_notification_store: AbstractNotificationStore | None = None
_photo_store: AbstractPhotoStore | None = None
_blob_storage: AbstractBlobStorage | None = None


def get_agency_store() -> AbstractAgencyStore:
    global _agency_store
    if _agency_store is None:
        seeded = parse_seed_agencies(settings.app.seed_agencies)
        _agency_store = InMemoryAgencyStore(seeded)
        logger.info("stores.agencies_seeded", extra={"count": len(seeded)})
    return _agency_store


def get_customer_store() -> AbstractCustomerStore:
    global _customer_store
    if _customer_store is None:
        _customer_store = InMemoryCustomerStore()
    return _customer_store


def get_notification_store() -> AbstractNotificationStore:
    global _notification_store
    if _notification_store is None:
        _notification_store = InMemoryNotificationStore()
    return _notification_store


def get_photo_store() -> AbstractPhotoStore:
    global _photo_store
    if _photo_store is None:
        _photo_store = InMemoryPhotoStore()
    return _photo_store


def get_blob_storage() -> AbstractBlobStorage:
    global _blob_storage
    if _blob_storage is None:
        _blob_storage = InMemoryBlobStorage()
    return _blob_storage


def reset_stores() -> None:
    """Forget every store; the next getter call builds a fresh one."""
    global _agency_store, _customer_store, _notification_store, _photo_store, _blob_storage
    _agency_store = None
    _customer_store = None
    _notification_store = None
    _photo_store = None
    _blob_storage = None
