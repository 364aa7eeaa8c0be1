"""Persistence interfaces.

Services depend on these abstractions, not on a concrete database client.
Every tenant-scoped method takes ``agency_id`` first: there is no call that
can address another tenant's rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import Customer
from agency_toolkit.schemas.notification import Notification
from agency_toolkit.schemas.photo import CustomerPhoto


class AbstractAgencyStore(ABC):
    """Lookup of tenants by their credentials."""

    @abstractmethod
    def get(self, agency_id: str) -> Agency | None:
        raise NotImplementedError

    @abstractmethod
    def get_by_api_key(self, api_key: str) -> Agency | None:
        raise NotImplementedError

    @abstractmethod
    def get_by_token(self, token: str) -> Agency | None:
        raise NotImplementedError

    @abstractmethod
    def add(self, agency: Agency) -> Agency:
        raise NotImplementedError


class AbstractCustomerStore(ABC):
    """Customer rows, always filtered by owning agency."""

    @abstractmethod
    def list_for_agency(self, agency_id: str) -> list[Customer]:
        """Return the agency's customers, newest first."""
        raise NotImplementedError

    @abstractmethod
    def count(self, agency_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def get(self, agency_id: str, customer_id: str) -> Customer | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_location(self, agency_id: str, location_id: str) -> Customer | None:
        raise NotImplementedError

    @abstractmethod
    def insert(self, agency_id: str, values: dict[str, Any]) -> Customer:
        raise NotImplementedError

    @abstractmethod
    def update(self, agency_id: str, customer_id: str, values: dict[str, Any]) -> Customer | None:
        """Apply ``values`` and return the updated row, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, agency_id: str, customer_id: str) -> bool:
        raise NotImplementedError


class AbstractNotificationStore(ABC):
    """In-app notifications, always filtered by owning agency."""

    @abstractmethod
    def list_for_agency(self, agency_id: str, *, limit: int, unread_only: bool = False) -> list[Notification]:
        raise NotImplementedError

    @abstractmethod
    def unread_count(self, agency_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def get(self, agency_id: str, notification_id: str) -> Notification | None:
        raise NotImplementedError

    @abstractmethod
    def insert(self, agency_id: str, values: dict[str, Any]) -> Notification:
        raise NotImplementedError

    @abstractmethod
    def update(
        self, agency_id: str, notification_id: str, values: dict[str, Any]
    ) -> Notification | None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, agency_id: str, notification_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_all_read(self, agency_id: str) -> int:
        """Mark every unread notification read; return how many changed."""
        raise NotImplementedError


class AbstractPhotoStore(ABC):
    @abstractmethod
    def insert(self, agency_id: str, customer_id: str, values: dict[str, Any]) -> CustomerPhoto:
        raise NotImplementedError

    @abstractmethod
    def list_for_customer(self, agency_id: str, customer_id: str) -> list[CustomerPhoto]:
        """Photos of one customer, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get(self, agency_id: str, photo_id: str) -> CustomerPhoto | None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, agency_id: str, photo_id: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class UploadResult:
    """Where a blob ended up.

    Attributes:
        url: Public URL of the stored object.
        pathname: Path the object was stored under.
        content_type: MIME type recorded with the object.
        size: Stored size in bytes.
    """

    url: str
    pathname: str
    content_type: str
    size: int


class AbstractBlobStorage(ABC):
    """Interface for blob storage providers."""

    @abstractmethod
    async def upload(self, content: bytes, pathname: str, content_type: str) -> UploadResult:
        """Store ``content`` under ``pathname`` (e.g. ``photos/<customer>/<file>``)."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, url: str) -> None:
        raise NotImplementedError
