"""In-memory stores (MVP).

Notes:
- Per-process only: data is lost on restart and not shared between workers.
- Thread-safe: each store uses a lock around its rows.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from agency_toolkit.adapters.storage.base import (
    AbstractAgencyStore,
    AbstractBlobStorage,
    AbstractCustomerStore,
    AbstractNotificationStore,
    AbstractPhotoStore,
    UploadResult,
)
from agency_toolkit.core.errors import StorageAppError
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import Customer
from agency_toolkit.schemas.notification import Notification
from agency_toolkit.schemas.photo import CustomerPhoto

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryAgencyStore(AbstractAgencyStore):
    def __init__(self, agencies: list[Agency] | None = None) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[str, Agency] = {}
        for agency in agencies or []:
            self.add(agency)

    def get(self, agency_id: str) -> Agency | None:
        with self._lock:
            return self._by_id.get(agency_id)

    def get_by_api_key(self, api_key: str) -> Agency | None:
        with self._lock:
            return next((a for a in self._by_id.values() if a.api_key == api_key), None)

    def get_by_token(self, token: str) -> Agency | None:
        with self._lock:
            return next((a for a in self._by_id.values() if a.token == token), None)

    def add(self, agency: Agency) -> Agency:
        with self._lock:
            self._by_id[agency.id] = agency
        return agency


class InMemoryCustomerStore(AbstractCustomerStore):
    def __init__(self, clock: Clock = _utcnow) -> None:
        self._lock = threading.RLock()
        self._rows: dict[str, Customer] = {}
        self._clock = clock

    def _owned(self, agency_id: str) -> list[Customer]:
        return [c for c in self._rows.values() if c.agency_id == agency_id]

    def list_for_agency(self, agency_id: str) -> list[Customer]:
        with self._lock:
            rows = self._owned(agency_id)
        return sorted(rows, key=lambda c: c.created_at, reverse=True)

    def count(self, agency_id: str) -> int:
        with self._lock:
            return len(self._owned(agency_id))

    def get(self, agency_id: str, customer_id: str) -> Customer | None:
        with self._lock:
            row = self._rows.get(customer_id)
        if row is None or row.agency_id != agency_id:
            return None
        return row

    def find_by_location(self, agency_id: str, location_id: str) -> Customer | None:
        with self._lock:
            return next(
                (c for c in self._owned(agency_id) if c.ghl_location_id == location_id),
                None,
            )

    def insert(self, agency_id: str, values: dict[str, Any]) -> Customer:
        now = self._clock()
        row = Customer(
            **{
                **values,
                "id": _new_id(),
                "agency_id": agency_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        with self._lock:
            self._rows[row.id] = row
        return row

    def update(self, agency_id: str, customer_id: str, values: dict[str, Any]) -> Customer | None:
        with self._lock:
            row = self.get(agency_id, customer_id)
            if row is None:
                return None
            updated = row.model_copy(update={**values, "updated_at": self._clock()})
            self._rows[customer_id] = updated
            return updated

    def delete(self, agency_id: str, customer_id: str) -> bool:
        with self._lock:
            if self.get(agency_id, customer_id) is None:
                return False
            del self._rows[customer_id]
            return True


class InMemoryNotificationStore(AbstractNotificationStore):
    def __init__(self, clock: Clock = _utcnow) -> None:
        self._lock = threading.RLock()
        self._rows: dict[str, Notification] = {}
        self._clock = clock

    def list_for_agency(self, agency_id: str, *, limit: int, unread_only: bool = False) -> list[Notification]:
        with self._lock:
            rows = [
                n
                for n in self._rows.values()
                if n.agency_id == agency_id and not (unread_only and n.read)
            ]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return rows[:limit]

    def unread_count(self, agency_id: str) -> int:
        with self._lock:
            return sum(1 for n in self._rows.values() if n.agency_id == agency_id and not n.read)

    def get(self, agency_id: str, notification_id: str) -> Notification | None:
        with self._lock:
            row = self._rows.get(notification_id)
        if row is None or row.agency_id != agency_id:
            return None
        return row

    def insert(self, agency_id: str, values: dict[str, Any]) -> Notification:
        row = Notification(
            **{
                **values,
                "id": _new_id(),
                "agency_id": agency_id,
                "created_at": self._clock(),
            }
        )
        with self._lock:
            self._rows[row.id] = row
        return row

    def update(
        self, agency_id: str, notification_id: str, values: dict[str, Any]
    ) -> Notification | None:
        with self._lock:
            row = self.get(agency_id, notification_id)
            if row is None:
                return None
            updated = row.model_copy(update=values)
            self._rows[notification_id] = updated
            return updated

    def delete(self, agency_id: str, notification_id: str) -> bool:
        with self._lock:
            if self.get(agency_id, notification_id) is None:
                return False
            del self._rows[notification_id]
            return True

    def mark_all_read(self, agency_id: str) -> int:
        with self._lock:
            unread = [
                n for n in self._rows.values() if n.agency_id == agency_id and not n.read
            ]
            for row in unread:
                self._rows[row.id] = row.model_copy(update={"read": True})
            return len(unread)


class InMemoryPhotoStore(AbstractPhotoStore):
    def __init__(self, clock: Clock = _utcnow) -> None:
        self._lock = threading.RLock()
        self._rows: dict[str, CustomerPhoto] = {}
        self._clock = clock

    def insert(self, agency_id: str, customer_id: str, values: dict[str, Any]) -> CustomerPhoto:
        row = CustomerPhoto(
            **{
                **values,
                "id": _new_id(),
                "agency_id": agency_id,
                "customer_id": customer_id,
                "created_at": self._clock(),
            }
        )
        with self._lock:
            self._rows[row.id] = row
        return row

    def list_for_customer(self, agency_id: str, customer_id: str) -> list[CustomerPhoto]:
        with self._lock:
            rows = [
                p
                for p in self._rows.values()
                if p.agency_id == agency_id and p.customer_id == customer_id
            ]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)

    def get(self, agency_id: str, photo_id: str) -> CustomerPhoto | None:
        with self._lock:
            row = self._rows.get(photo_id)
        if row is None or row.agency_id != agency_id:
            return None
        return row

    def delete(self, agency_id: str, photo_id: str) -> bool:
        with self._lock:
            if self.get(agency_id, photo_id) is None:
                return False
            del self._rows[photo_id]
            return True


class InMemoryBlobStorage(AbstractBlobStorage):
    """Keeps uploaded bytes in a dict keyed by their public URL."""

    def __init__(self, base_url: str = "memory://blobs") -> None:
        self._base_url = base_url.rstrip("/")
        self._lock = threading.RLock()
        self._blobs: dict[str, tuple[bytes, str]] = {}

    async def upload(self, content: bytes, pathname: str, content_type: str) -> UploadResult:
        if not pathname:
            raise StorageAppError(code="blob_invalid_path", message="Blob path must not be empty")
        url = f"{self._base_url}/{pathname.lstrip('/')}"
        with self._lock:
            self._blobs[url] = (content, content_type)
        logger.debug("blob.uploaded", extra={"blob_path": pathname, "size": len(content)})
        return UploadResult(url=url, pathname=pathname, content_type=content_type, size=len(content))

    async def delete(self, url: str) -> None:
        with self._lock:
            self._blobs.pop(url, None)

    def read(self, url: str) -> bytes | None:
        with self._lock:
            item = self._blobs.get(url)
        return item[0] if item else None
