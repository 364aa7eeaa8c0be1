"""Dashboard-side management of stored customer photos."""

from __future__ import annotations

import logging

from agency_toolkit.adapters.storage.base import (
    AbstractBlobStorage,
    AbstractCustomerStore,
    AbstractPhotoStore,
)
from agency_toolkit.core.errors import AppError, NotFoundAppError
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.photo import CustomerPhoto

logger = logging.getLogger(__name__)


class PhotoService:
    def __init__(
        self,
        photos: AbstractPhotoStore,
        customers: AbstractCustomerStore,
        blobs: AbstractBlobStorage,
    ) -> None:
        self.photos = photos
        self.customers = customers
        self.blobs = blobs

    def list_for_customer(self, agency: Agency, customer_id: str) -> list[CustomerPhoto]:
        if self.customers.get(agency.id, customer_id) is None:
            raise NotFoundAppError(code="customer_not_found", message="Customer not found")
        return self.photos.list_for_customer(agency.id, customer_id)

    async def delete(self, agency: Agency, photo_id: str) -> None:
        """Remove the photo, its blob, and one from the customer's photo count.

        A blob that cannot be deleted is logged and the row is removed anyway.

        Raises:
            NotFoundAppError: If the photo does not belong to the agency.
        """
        photo = self.photos.get(agency.id, photo_id)
        if photo is None:
            raise NotFoundAppError(code="photo_not_found", message="Photo not found")

        try:
            await self.blobs.delete(photo.blob_url)
        except AppError as exc:
            logger.error(
                "photos.blob_delete_failed",
                extra={"photo_id": photo_id, "error_code": exc.code, "error_msg": exc.message},
            )

        self.photos.delete(agency.id, photo_id)

        customer = self.customers.get(agency.id, photo.customer_id)
        if customer is not None:
            self.customers.update(
                agency.id, customer.id, {"photo_count": max(0, customer.photo_count - 1)}
            )

        logger.info(
            "photos.deleted",
            extra={"agency_id": agency.id, "customer_id": photo.customer_id, "photo_id": photo_id},
        )
