"""Image metadata read from uploaded bytes."""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image

logger = logging.getLogger(__name__)


def image_dimensions(content: bytes) -> tuple[int | None, int | None]:
    """Return ``(width, height)`` of an encoded image, or ``(None, None)``.

    Only the header is parsed. Bytes Pillow cannot identify are logged and
    reported as unknown dimensions.
    """
    try:
        with Image.open(BytesIO(content)) as img:
            width, height = img.size
    except (OSError, ValueError) as exc:
        logger.warning(
            "images.dimensions_failed",
            extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
        )
        return None, None
    return width, height
