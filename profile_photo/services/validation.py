from __future__ import annotations

from profile_photo.models.photos import UploadRequest
from profile_photo.services.errors import EmptyUploadError, NotAnImageError, UploadTooLargeError


def format_megabytes(num_bytes: int) -> str:
    """Render a byte count as whole (or fractional) megabytes, e.g. '5 MB'."""
    return f"{num_bytes / (1024 * 1024):g} MB"


def too_large_error(max_upload_bytes: int) -> UploadTooLargeError:
    return UploadTooLargeError(
        f"File too large. Maximum allowed upload: {format_megabytes(max_upload_bytes)}."
    )


def validate_upload(request: UploadRequest, max_upload_bytes: int) -> None:
    """
    Check upload metadata before any bytes are decoded.

    Raises:
        EmptyUploadError: No stream, or a declared length of zero or less.
        UploadTooLargeError: Declared length above `max_upload_bytes`.
        NotAnImageError: Content type missing or not `image/*`.
    """
    if request.stream is None:
        raise EmptyUploadError("No file provided.")
    if request.declared_length <= 0:
        raise EmptyUploadError()
    if request.declared_length > max_upload_bytes:
        raise too_large_error(max_upload_bytes)

    content_type = request.content_type or ""
    if not content_type.strip() or not content_type.lower().startswith("image/"):
        raise NotAnImageError()
