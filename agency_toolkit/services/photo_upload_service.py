"""Photo uploads posted by the embeddable form on customer pages.

One upload session stores up to N photos for the customer behind a CRM
location. The customer is created on first upload. Sessions are throttled
per (agency, location) by the cooldown gate, which is only armed once a
session actually stored photos.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx
from fastapi import UploadFile

from agency_toolkit.adapters.storage.base import (
    AbstractAgencyStore,
    AbstractBlobStorage,
    AbstractCustomerStore,
    AbstractPhotoStore,
)
from agency_toolkit.core.auth import resolve_agency_by_token
from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import AppError, PermissionAppError, StorageAppError, ValidationAppError
from agency_toolkit.core.file_validation import check_image_type, read_upload_file_limited
from agency_toolkit.core.rate_limit import build_gate_key, check_rate_gate, mark_rate_gate
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import Customer
from agency_toolkit.schemas.photo import PhotoUploadResponse, UploadCustomer, UploadedPhoto
from agency_toolkit.services.notification_service import NotificationService
from agency_toolkit.utils.images import image_dimensions
from agency_toolkit.utils.tokens import generate_upload_customer_token

logger = logging.getLogger(__name__)

DEFAULT_BUSINESS_NAME = "Unknown Business"
WEBHOOK_TIMEOUT_SECONDS = 10.0

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def safe_filename(filename: str | None) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename or "photo")


def parse_photo_names(raw: str | None) -> list[str]:
    """Decode the optional JSON list of photo names; malformed input yields []."""
    if not raw:
        return []
    try:
        names = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(names, list):
        return []
    return [n if isinstance(n, str) else "" for n in names]


@dataclass
class PhotoUploadRequest:
    key: str | None
    location_id: str | None
    business_name: str | None = None
    owner_name: str | None = None
    photo_names: list[str] = field(default_factory=list)
    photos: list[UploadFile] = field(default_factory=list)


class PhotoUploadService:
    """Validate, store and announce an embed photo upload session."""

    def __init__(
        self,
        *,
        agencies: AbstractAgencyStore,
        customers: AbstractCustomerStore,
        photos: AbstractPhotoStore,
        blobs: AbstractBlobStorage,
        notifications: NotificationService,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.agencies = agencies
        self.customers = customers
        self.photos = photos
        self.blobs = blobs
        self.notifications = notifications
        self.http_client = http_client

    def _validate_request(self, request: PhotoUploadRequest) -> None:
        if not request.key:
            raise ValidationAppError(code="missing_token", message="Agency token is required")
        if not request.location_id:
            raise ValidationAppError(code="missing_location", message="Location ID is required")
        if not request.photos:
            raise ValidationAppError(code="missing_photos", message="At least one photo is required")

        max_photos = settings.app.max_photos_per_upload
        if len(request.photos) > max_photos:
            raise ValidationAppError(
                code="too_many_photos",
                message=f"Maximum {max_photos} photos allowed per upload",
                details={"limit": max_photos, "actual_value": len(request.photos)},
            )

    def _find_or_create_customer(
        self,
        agency: Agency,
        location_id: str,
        business_name: str,
        owner_name: str,
    ) -> tuple[Customer, bool]:
        customer = self.customers.find_by_location(agency.id, location_id)
        if customer is None:
            customer = self.customers.insert(
                agency.id,
                {
                    "name": business_name or DEFAULT_BUSINESS_NAME,
                    "owner_name": owner_name or None,
                    "ghl_location_id": location_id,
                    "token": generate_upload_customer_token(),
                    "is_active": True,
                    "photo_count": 0,
                },
            )
            logger.info(
                "photo_upload.customer_created",
                extra={"agency_id": agency.id, "customer_id": customer.id},
            )
            return customer, True

        changes: dict[str, str] = {}
        if owner_name and not customer.owner_name:
            changes["owner_name"] = owner_name
        if business_name and customer.name == DEFAULT_BUSINESS_NAME:
            changes["name"] = business_name
        if changes:
            customer = self.customers.update(agency.id, customer.id, changes) or customer
        return customer, False

    async def _store_photos(
        self,
        agency: Agency,
        customer: Customer,
        request: PhotoUploadRequest,
        business_name: str,
    ) -> list[UploadedPhoto]:
        # Validate every file before anything is written.
        prepared: list[tuple[UploadFile, str, bytes]] = []
        for upload in request.photos:
            content_type = check_image_type(upload)
            content = await read_upload_file_limited(upload)
            prepared.append((upload, content_type, content))

        stored: list[UploadedPhoto] = []
        for index, (upload, content_type, content) in enumerate(prepared):
            name = (
                request.photo_names[index]
                if index < len(request.photo_names) and request.photo_names[index]
                else f"{business_name or customer.name} - Photo {customer.photo_count + index + 1}"
            )
            pathname = f"photos/{customer.id}/{int(time.time() * 1000)}-{safe_filename(upload.filename)}"
            width, height = image_dimensions(content)
            try:
                blob = await self.blobs.upload(content, pathname, content_type)
                photo = self.photos.insert(
                    agency.id,
                    customer.id,
                    {
                        "blob_url": blob.url,
                        "name": name,
                        "original_filename": upload.filename,
                        "content_type": content_type,
                        "file_size": blob.size,
                        "width": width,
                        "height": height,
                    },
                )
            except AppError as exc:
                # One failed photo does not abort the session.
                logger.error(
                    "photo_upload.photo_failed",
                    extra={"customer_id": customer.id, "error_code": exc.code, "error_msg": exc.message},
                )
                continue
            stored.append(UploadedPhoto(id=photo.id, name=name, blob_url=blob.url))
        return stored

    async def _send_webhook(self, url: str, payload: dict) -> bool:
        """POST the upload event to the agency's webhook; failures are logged only."""
        try:
            if self.http_client is not None:
                response = await self.http_client.post(url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=WEBHOOK_TIMEOUT_SECONDS) as client:
                    response = await client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "photo_upload.webhook_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            return False
        return True

    async def upload(self, request: PhotoUploadRequest) -> PhotoUploadResponse:
        """Run one upload session.

        Raises:
            ValidationAppError: Missing fields, too many photos, bad files.
            AuthenticationAppError: Unknown agency token.
            PermissionAppError: Uploads disabled for the agency.
            RateLimitedAppError: Same location uploaded within the window.
            StorageAppError: No photo could be stored.
        """
        self._validate_request(request)
        agency = resolve_agency_by_token(request.key or "", self.agencies)

        upload_settings = agency.settings.photo_uploads
        if not upload_settings.enabled:
            raise PermissionAppError(
                code="uploads_disabled",
                message="Photo uploads are disabled for this agency",
            )

        location_id = request.location_id or ""
        gate_key = build_gate_key("upload", agency.id, location_id)
        check_rate_gate(gate_key, settings.rate_gate.upload_window_seconds)

        business_name = (request.business_name or "").strip()
        owner_name = (request.owner_name or "").strip()
        customer, is_new = self._find_or_create_customer(agency, location_id, business_name, owner_name)

        uploaded = await self._store_photos(agency, customer, request, business_name)
        if not uploaded:
            raise StorageAppError(code="upload_failed", message="Failed to upload any photos")

        customer = (
            self.customers.update(
                agency.id, customer.id, {"photo_count": customer.photo_count + len(uploaded)}
            )
            or customer
        )

        notification_sent = False
        if upload_settings.notify_on_upload:
            if upload_settings.notification_method == "webhook" and upload_settings.webhook_url:
                notification_sent = await self._send_webhook(
                    upload_settings.webhook_url,
                    {
                        "event": "photo_upload",
                        "customer_id": customer.id,
                        "customer_name": customer.name,
                        "business_name": business_name,
                        "location_id": location_id,
                        "photo_count": len(uploaded),
                        "photos": [{"name": p.name, "url": p.blob_url} for p in uploaded],
                        "is_new_customer": is_new,
                        "timestamp": datetime.now(timezone.utc).isoformat(),
                    },
                )
            else:
                count_text = "1 photo" if len(uploaded) == 1 else f"{len(uploaded)} photos"
                self.notifications.notify(
                    agency,
                    type="photo_upload",
                    title="New photos uploaded",
                    message=f"{business_name or customer.name} uploaded {count_text}",
                    link=f"/customers/{customer.id}#photos",
                )
                notification_sent = True

        mark_rate_gate(gate_key)

        logger.info(
            "photo_upload.completed",
            extra={
                "agency_id": agency.id,
                "customer_id": customer.id,
                "photo_count": len(uploaded),
                "is_new_customer": is_new,
            },
        )
        return PhotoUploadResponse(
            customer=UploadCustomer(id=customer.id, name=customer.name, is_new=is_new),
            photos=uploaded,
            notification_sent=notification_sent,
        )
