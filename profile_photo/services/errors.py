"""
Failures raised by the photo pipeline stages.

Each stage raises a subclass of `PhotoProcessingError`; the pipeline turns it
into a `ProcessResult`. Messages are safe to show to end users.
"""

from __future__ import annotations

from profile_photo.api.v1.schemas import FailureKind


class PhotoProcessingError(Exception):
    """Base class for every rejected upload."""

    kind: FailureKind = FailureKind.PROCESSING_FAILED
    default_message: str = "Image processing failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyUploadError(PhotoProcessingError):
    kind = FailureKind.EMPTY_UPLOAD
    default_message = "Empty file."


class UploadTooLargeError(PhotoProcessingError):
    kind = FailureKind.TOO_LARGE
    default_message = "File too large."


class NotAnImageError(PhotoProcessingError):
    kind = FailureKind.NOT_AN_IMAGE
    default_message = "File must be an image."


class UnsupportedFormatError(PhotoProcessingError):
    kind = FailureKind.UNSUPPORTED_FORMAT
    default_message = "Unknown or unsupported image format."


class ImageDecodeError(PhotoProcessingError):
    kind = FailureKind.DECODE_ERROR
    default_message = "Image could not be decoded."


class ImageTooSmallError(PhotoProcessingError):
    kind = FailureKind.IMAGE_TOO_SMALL
    default_message = "Image is too small."


class CompressionBudgetExceededError(PhotoProcessingError):
    kind = FailureKind.COMPRESSION_BUDGET_EXCEEDED
    default_message = "Unable to compress image enough."


class StorageWriteError(PhotoProcessingError):
    """Raised when the new photo cannot be written to disk."""

    kind = FailureKind.STORAGE_WRITE_FAILED
    default_message = "Could not save the image. Please try again later."
