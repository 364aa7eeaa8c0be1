"""Upload validation helpers for embed photo uploads."""
from __future__ import annotations

import logging

from fastapi import UploadFile

from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})

_CHUNK_SIZE = 8192


def _too_large(max_mb: int) -> ValidationAppError:
    return ValidationAppError(
        code="file_too_large",
        message=f"File size must be under {max_mb}MB",
        details={"limit": max_mb * 1024 * 1024},
    )


def check_image_type(file: UploadFile) -> str:
    """Return the file's content type if it is an accepted image type.

    Raises:
        ValidationAppError: For anything other than JPEG, PNG or WebP.
    """
    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationAppError(
            code="invalid_file_type",
            message=f"Invalid file type: {content_type or 'unknown'}. Only JPEG, PNG, and WebP are allowed.",
            details={"file_type": content_type},
        )
    return content_type


async def read_upload_file_limited(file: UploadFile, *, max_mb: int | None = None) -> bytes:
    """Read an uploaded file in chunks enforcing the max size limit.

    Uses the multipart-reported size when available, then enforces the
    limit again while reading so a lying header cannot exhaust memory.

    Args:
        file: FastAPI upload file instance.
        max_mb: Size limit in megabytes; defaults to the photo size setting.

    Returns:
        File content as bytes if within the allowed size limit.

    Raises:
        ValidationAppError: If the file exceeds the size limit.
    """
    limit_mb = max_mb or settings.app.max_photo_size_mb
    max_bytes = limit_mb * 1024 * 1024

    file_size = getattr(file, "size", None)
    if file_size is not None and file_size > max_bytes:
        logger.warning(
            "file_validation.rejected_by_header",
            extra={"file_size": file_size, "max_bytes": max_bytes},
        )
        raise _too_large(limit_mb)

    size = 0
    chunks: list[bytes] = []
    while chunk := await file.read(_CHUNK_SIZE):
        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "file_validation.rejected_by_chunked_read",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise _too_large(limit_mb)
        chunks.append(chunk)

    return b"".join(chunks)
