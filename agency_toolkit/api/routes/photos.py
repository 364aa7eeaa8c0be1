from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from agency_toolkit.adapters.storage.base import (
    AbstractAgencyStore,
    AbstractBlobStorage,
    AbstractCustomerStore,
    AbstractNotificationStore,
    AbstractPhotoStore,
)
from agency_toolkit.core.auth import get_current_agency
from agency_toolkit.core.stores import (
    get_agency_store,
    get_blob_storage,
    get_customer_store,
    get_notification_store,
    get_photo_store,
)
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import DeleteResponse
from agency_toolkit.schemas.photo import CustomerPhoto, PhotoUploadResponse
from agency_toolkit.services.notification_service import NotificationService
from agency_toolkit.services.photo_service import PhotoService
from agency_toolkit.services.photo_upload_service import (
    PhotoUploadRequest,
    PhotoUploadService,
    parse_photo_names,
)

router = APIRouter(tags=["Embed"])


def get_photo_upload_service(
    agencies: Annotated[AbstractAgencyStore, Depends(get_agency_store)],
    customers: Annotated[AbstractCustomerStore, Depends(get_customer_store)],
    photos: Annotated[AbstractPhotoStore, Depends(get_photo_store)],
    blobs: Annotated[AbstractBlobStorage, Depends(get_blob_storage)],
    notifications: Annotated[AbstractNotificationStore, Depends(get_notification_store)],
) -> PhotoUploadService:
    return PhotoUploadService(
        agencies=agencies,
        customers=customers,
        photos=photos,
        blobs=blobs,
        notifications=NotificationService(notifications),
    )


@router.post("/photos/upload", response_model=PhotoUploadResponse)
async def upload_photos(
    service: Annotated[PhotoUploadService, Depends(get_photo_upload_service)],
    key: str | None = Form(None, description="Public agency token from the embed snippet."),
    location_id: str | None = Form(None, description="CRM location id of the customer."),
    business_name: str | None = Form(None),
    owner_name: str | None = Form(None),
    photo_names: str | None = Form(None, description="JSON list of display names, one per photo."),
    photos: list[UploadFile] | None = File(None, description="JPEG, PNG or WebP images."),
) -> PhotoUploadResponse:
    """Store photos uploaded from the embeddable form on a customer's page.

    Authenticates by the agency's public token rather than an API key and is
    throttled per location by the upload cooldown.
    """
    return await service.upload(
        PhotoUploadRequest(
            key=key,
            location_id=location_id,
            business_name=business_name,
            owner_name=owner_name,
            photo_names=parse_photo_names(photo_names),
            photos=photos or [],
        )
    )


def get_photo_service(
    photos: Annotated[AbstractPhotoStore, Depends(get_photo_store)],
    customers: Annotated[AbstractCustomerStore, Depends(get_customer_store)],
    blobs: Annotated[AbstractBlobStorage, Depends(get_blob_storage)],
) -> PhotoService:
    return PhotoService(photos=photos, customers=customers, blobs=blobs)


CurrentAgency = Annotated[Agency, Depends(get_current_agency)]


@router.get("/customers/{customer_id}/photos", response_model=list[CustomerPhoto], tags=["Photos"])
async def list_customer_photos(
    customer_id: str,
    agency: CurrentAgency,
    service: Annotated[PhotoService, Depends(get_photo_service)],
) -> list[CustomerPhoto]:
    """List a customer's uploaded photos, newest first."""
    return service.list_for_customer(agency, customer_id)


@router.delete("/photos/{photo_id}", response_model=DeleteResponse, tags=["Photos"])
async def delete_photo(
    photo_id: str,
    agency: CurrentAgency,
    service: Annotated[PhotoService, Depends(get_photo_service)],
) -> DeleteResponse:
    await service.delete(agency, photo_id)
    return DeleteResponse()
