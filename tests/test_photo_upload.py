"""Tests for the embed photo upload flow."""

from __future__ import annotations

import json
import logging
from io import BytesIO
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from PIL import Image
from starlette.datastructures import Headers

from agency_toolkit.adapters.storage.in_memory import (
    InMemoryAgencyStore,
    InMemoryBlobStorage,
    InMemoryCustomerStore,
    InMemoryNotificationStore,
    InMemoryPhotoStore,
)
from agency_toolkit.core.errors import RateLimitedAppError, StorageAppError
from agency_toolkit.core.rate_limit import build_gate_key, get_rate_gate
from agency_toolkit.core.stores import (
    get_agency_store,
    get_blob_storage,
    get_customer_store,
    get_photo_store,
)
from agency_toolkit.schemas.agency import Agency, AgencySettings, PhotoUploadSettings
from agency_toolkit.services.notification_service import NotificationService
from agency_toolkit.services.photo_upload_service import (
    PhotoUploadRequest,
    PhotoUploadService,
    parse_photo_names,
    safe_filename,
)
from agency_toolkit.utils.images import image_dimensions

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"
PNG = b"\x89PNG\r\n\x1a\nfake-png"


def png_bytes(width: int, height: int) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def photo(name: str = "front.jpg", content: bytes = JPEG, content_type: str = "image/jpeg"):
    return ("photos", (name, content, content_type))


def upload(client: TestClient, files=None, **fields):
    data = {"key": "ac_public1", "location_id": "loc-1", "business_name": "Joe's Pizza"}
    data.update(fields)
    data = {k: v for k, v in data.items() if v is not None}
    return client.post("/v1/photos/upload", data=data, files=files)


class TestUploadRoute:
    def test_first_upload_creates_customer_and_notifies(self, client: TestClient, acme_headers):
        response = upload(
            client,
            files=[photo(), photo("side view.png", PNG, "image/png")],
            owner_name="Joe",
            photo_names=json.dumps(["Storefront"]),
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["success"] is True
        assert body["customer"]["is_new"] is True
        assert body["customer"]["name"] == "Joe's Pizza"
        assert [p["name"] for p in body["photos"]] == ["Storefront", "Joe's Pizza - Photo 2"]
        assert body["notification_sent"] is True

        customer = get_customer_store().get("ag-1", body["customer"]["id"])
        assert customer.photo_count == 2
        assert customer.owner_name == "Joe"
        assert customer.ghl_location_id == "loc-1"
        assert customer.token.startswith("bp_")

        second_url = body["photos"][1]["blob_url"]
        assert f"/photos/{customer.id}/" in second_url
        assert second_url.endswith("-side_view.png")
        assert get_blob_storage().read(second_url) == PNG

        notifications = client.get("/v1/notifications", headers=acme_headers).json()
        assert notifications["unread_count"] == 1
        assert notifications["notifications"][0]["message"] == "Joe's Pizza uploaded 2 photos"
        assert notifications["notifications"][0]["link"] == f"/customers/{customer.id}#photos"

    def test_existing_customer_is_reused(self, client: TestClient, acme_headers):
        existing = client.post(
            "/v1/customers", json={"name": "Joe's", "ghl_location_id": "loc-9"}, headers=acme_headers
        ).json()

        body = upload(client, files=[photo()], location_id="loc-9").json()

        assert body["customer"] == {"id": existing["id"], "name": "Joe's", "is_new": False}
        assert get_customer_store().get("ag-1", existing["id"]).photo_count == 1

    def test_second_upload_for_location_is_throttled(self, client: TestClient):
        assert upload(client, files=[photo()]).status_code == 200

        response = upload(client, files=[photo()])

        assert response.status_code == 429
        body = response.json()
        assert body["code"] == "rate_limited"
        assert body["error"] == "Please wait before trying again"
        assert 1 <= body["retry_after"] <= 60
        assert response.headers["Retry-After"] == str(body["retry_after"])

    def test_other_location_is_not_throttled(self, client: TestClient):
        assert upload(client, files=[photo()]).status_code == 200

        assert upload(client, files=[photo()], location_id="loc-2").status_code == 200

    def test_other_agency_same_location_is_not_throttled(self, client: TestClient):
        assert upload(client, files=[photo()]).status_code == 200

        assert upload(client, files=[photo()], key="be_public2").status_code == 200

    @pytest.mark.parametrize(
        ("fields", "code"),
        [
            ({"key": None}, "missing_token"),
            ({"location_id": None}, "missing_location"),
        ],
    )
    def test_missing_fields(self, client: TestClient, fields, code):
        response = upload(client, files=[photo()], **fields)

        assert response.status_code == 400
        assert response.json()["code"] == code

    def test_missing_photos(self, client: TestClient):
        response = upload(client)

        assert response.status_code == 400
        assert response.json()["code"] == "missing_photos"

    def test_too_many_photos(self, client: TestClient):
        response = upload(client, files=[photo(f"p{i}.jpg") for i in range(6)])

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "too_many_photos"
        assert body["error"] == "Maximum 5 photos allowed per upload"

    def test_unknown_token(self, client: TestClient):
        response = upload(client, files=[photo()], key="nope")

        assert response.status_code == 401
        assert response.json()["code"] == "invalid_token"

    def test_invalid_file_type_does_not_start_cooldown(self, client: TestClient):
        response = upload(client, files=[photo(), photo("notes.txt", b"hello", "text/plain")])

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_file_type"
        assert get_customer_store().find_by_location("ag-1", "loc-1").photo_count == 0

        assert upload(client, files=[photo()]).status_code == 200

    def test_uploads_disabled(self, client: TestClient):
        get_agency_store().get("ag-1").settings.photo_uploads.enabled = False

        response = upload(client, files=[photo()])

        assert response.status_code == 403
        assert response.json()["code"] == "uploads_disabled"

    def test_notifications_can_be_turned_off(self, client: TestClient, acme_headers):
        get_agency_store().get("ag-1").settings.photo_uploads.notify_on_upload = False

        body = upload(client, files=[photo()]).json()

        assert body["notification_sent"] is False
        assert client.get("/v1/notifications", headers=acme_headers).json()["unread_count"] == 0

    def test_upload_succeeds_with_debug_blob_logging(self, client: TestClient, caplog):
        caplog.set_level(logging.DEBUG, logger="agency_toolkit.adapters.storage.in_memory")

        response = upload(client, files=[photo("front.png", PNG, "image/png")])

        assert response.status_code == 200, response.text
        (record,) = [r for r in caplog.records if r.getMessage() == "blob.uploaded"]
        assert record.blob_path.startswith("photos/")
        assert record.size == len(PNG)

    def test_photo_rows_record_dimensions(self, client: TestClient):
        body = upload(
            client, files=[photo("real.png", png_bytes(3, 2), "image/png"), photo("fake.jpg")]
        ).json()

        rows = {
            p.name: p for p in get_photo_store().list_for_customer("ag-1", body["customer"]["id"])
        }
        assert len(body["photos"]) == 2
        real = rows[body["photos"][0]["name"]]
        fake = rows[body["photos"][1]["name"]]
        assert (real.width, real.height) == (3, 2)
        assert (fake.width, fake.height) == (None, None)


def build_service(agency: Agency, *, http_client=None, blobs=None) -> PhotoUploadService:
    return PhotoUploadService(
        agencies=InMemoryAgencyStore([agency]),
        customers=InMemoryCustomerStore(),
        photos=InMemoryPhotoStore(),
        blobs=blobs or InMemoryBlobStorage(),
        notifications=NotificationService(InMemoryNotificationStore()),
        http_client=http_client,
    )


def upload_file(name: str = "a.jpg", content: bytes = JPEG, content_type: str = "image/jpeg"):
    return UploadFile(
        file=BytesIO(content),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def webhook_agency(url: str = "https://hooks.example.com/upload") -> Agency:
    return Agency(
        id="wh-1",
        name="Hooked",
        api_key="key-wh",
        token="ho_tok",
        plan="pro",
        settings=AgencySettings(
            photo_uploads=PhotoUploadSettings(notification_method="webhook", webhook_url=url)
        ),
    )


class TestUploadService:
    @pytest.mark.asyncio
    async def test_webhook_receives_upload_event(self):
        received: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            service = build_service(webhook_agency(), http_client=http_client)
            result = await service.upload(
                PhotoUploadRequest(
                    key="ho_tok",
                    location_id="loc-7",
                    business_name="Joe's Pizza",
                    photos=[upload_file()],
                )
            )

        assert result.notification_sent is True
        (event,) = received
        assert event["event"] == "photo_upload"
        assert event["location_id"] == "loc-7"
        assert event["photo_count"] == 1
        assert event["is_new_customer"] is True
        assert event["photos"][0]["url"] == result.photos[0].blob_url
        assert service.notifications.list(webhook_agency()).unread_count == 0

    @pytest.mark.asyncio
    async def test_failing_webhook_does_not_fail_upload(self):
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        ) as http_client:
            service = build_service(webhook_agency(), http_client=http_client)
            result = await service.upload(
                PhotoUploadRequest(key="ho_tok", location_id="loc-7", photos=[upload_file()])
            )

        assert result.success is True
        assert result.notification_sent is False
        assert result.customer.name == "Unknown Business"

    @pytest.mark.asyncio
    async def test_nothing_stored_raises_and_leaves_gate_open(self):
        blobs = InMemoryBlobStorage()
        blobs.upload = AsyncMock(side_effect=StorageAppError(code="blob_down", message="Blob store down"))
        agency = webhook_agency()
        service = build_service(agency, blobs=blobs)
        request = PhotoUploadRequest(key="ho_tok", location_id="loc-7", photos=[upload_file()])

        with pytest.raises(StorageAppError) as exc_info:
            await service.upload(request)

        assert exc_info.value.code == "upload_failed"
        assert get_rate_gate().is_limited(build_gate_key("upload", agency.id, "loc-7"), 60) is False

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_stored_photos(self):
        blobs = InMemoryBlobStorage()
        real_upload = blobs.upload
        calls = {"n": 0}

        async def flaky(content, pathname, content_type):
            calls["n"] += 1
            if calls["n"] == 2:
                raise StorageAppError(code="blob_down", message="Blob store down")
            return await real_upload(content, pathname, content_type)

        blobs.upload = flaky
        service = build_service(webhook_agency(), blobs=blobs)

        result = await service.upload(
            PhotoUploadRequest(
                key="ho_tok",
                location_id="loc-7",
                photos=[upload_file("a.jpg"), upload_file("b.jpg"), upload_file("c.jpg")],
            )
        )

        assert len(result.photos) == 2

    @pytest.mark.asyncio
    async def test_successful_upload_starts_cooldown(self):
        service = build_service(webhook_agency(url=""))
        request = PhotoUploadRequest(key="ho_tok", location_id="loc-7", photos=[upload_file()])
        await service.upload(request)

        with pytest.raises(RateLimitedAppError) as exc_info:
            await service.upload(
                PhotoUploadRequest(key="ho_tok", location_id="loc-7", photos=[upload_file()])
            )

        assert exc_info.value.retry_after > 0


class TestHelpers:
    def test_safe_filename(self):
        assert safe_filename("my photo (1).JPG") == "my_photo__1_.JPG"
        assert safe_filename(None) == "photo"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, []),
            ("", []),
            ("not json", []),
            ('{"a": 1}', []),
            ('["Front", 3, "Back"]', ["Front", "", "Back"]),
        ],
    )
    def test_parse_photo_names(self, raw, expected):
        assert parse_photo_names(raw) == expected

    def test_image_dimensions(self):
        assert image_dimensions(png_bytes(4, 7)) == (4, 7)

    def test_image_dimensions_of_unreadable_bytes(self, caplog):
        assert image_dimensions(JPEG) == (None, None)
        assert any(r.getMessage() == "images.dimensions_failed" for r in caplog.records)
