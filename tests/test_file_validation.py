from __future__ import annotations

from io import BytesIO

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from agency_toolkit.core.errors import ValidationAppError
from agency_toolkit.core.file_validation import check_image_type, read_upload_file_limited


def make_upload(content: bytes, content_type: str = "image/jpeg", size: int | None = None) -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename="photo.jpg",
        size=size,
        headers=Headers({"content-type": content_type}),
    )


@pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp", "IMAGE/PNG"])
def test_accepted_image_types(content_type: str) -> None:
    assert check_image_type(make_upload(b"x", content_type)) == content_type.lower()


@pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", "text/plain"])
def test_rejected_types(content_type: str) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        check_image_type(make_upload(b"x", content_type))

    assert exc_info.value.code == "invalid_file_type"


@pytest.mark.asyncio
async def test_reads_file_within_limit() -> None:
    content = b"a" * (1024 * 1024)

    assert await read_upload_file_limited(make_upload(content), max_mb=1) == content


@pytest.mark.asyncio
async def test_rejects_oversized_file_while_reading() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        await read_upload_file_limited(make_upload(b"a" * (1024 * 1024 + 1)), max_mb=1)

    assert exc_info.value.code == "file_too_large"
    assert exc_info.value.message == "File size must be under 1MB"


@pytest.mark.asyncio
async def test_rejects_by_reported_size() -> None:
    with pytest.raises(ValidationAppError):
        await read_upload_file_limited(make_upload(b"tiny", size=10 * 1024 * 1024), max_mb=5)
