"""
Decode uploaded bytes into an RGBA pixel buffer using Pillow.

The upload stream is read to completion here; the number of bytes actually
read is re-checked against the upload limit because the declared length
comes from the client.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from profile_photo.models.photos import PixelBuffer
from profile_photo.services.errors import EmptyUploadError, ImageDecodeError, UnsupportedFormatError
from profile_photo.services.validation import too_large_error

logger = logging.getLogger(__name__)


def read_upload(stream: BinaryIO, max_upload_bytes: int) -> bytes:
    """Read the whole stream, stopping one byte past `max_upload_bytes`."""
    data = stream.read(max_upload_bytes + 1)
    if not data:
        raise EmptyUploadError()
    if len(data) > max_upload_bytes:
        raise too_large_error(max_upload_bytes)
    return data


def decode_image(data: bytes) -> PixelBuffer:
    """
    Decode compressed image bytes.

    Raises:
        UnsupportedFormatError: Pillow does not recognize the container.
        ImageDecodeError: The image is recognized but cannot be decoded.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except UnidentifiedImageError as exc:
        raise UnsupportedFormatError() from exc
    except Image.DecompressionBombError as exc:
        logger.warning("Rejected oversized image: %s", exc)
        raise ImageDecodeError("Image dimensions are too large.") from exc
    except Exception as exc:  # noqa: BLE001
        logger.info("Failed to decode uploaded image: %s", exc)
        raise ImageDecodeError() from exc

    return PixelBuffer(image=rgba)


def decode_upload(stream: BinaryIO, max_upload_bytes: int) -> PixelBuffer:
    data = read_upload(stream, max_upload_bytes)
    return decode_image(data)
