"""
Profile photo ingestion pipeline.

    validate -> decode -> normalize geometry -> flatten alpha
             -> fit JPEG to budget -> store -> retire previous photo

Each stage raises a `PhotoProcessingError` on rejection; `process_upload`
turns the first one into a failed `ProcessResult`. Only the store step has a
durable side effect, and the previous photo is retired only after the new one
is on disk.
"""

from __future__ import annotations

import logging

from profile_photo.config import PhotoSettings, get_settings
from profile_photo.api.v1.schemas import FailureKind
from profile_photo.models.photos import ProcessResult, UploadRequest
from profile_photo.services import encoder
from profile_photo.services.compositor import flatten_onto_white
from profile_photo.services.decoder import decode_upload
from profile_photo.services.errors import PhotoProcessingError
from profile_photo.services.geometry import normalize_geometry
from profile_photo.services.storage import PhotoStore, get_photo_store
from profile_photo.services.validation import validate_upload

logger = logging.getLogger(__name__)


def _run(request: UploadRequest, settings: PhotoSettings, store: PhotoStore) -> str:
    validate_upload(request, settings.max_upload_bytes)
    logger.debug("Upload validated (%s, %d bytes declared)", request.content_type, request.declared_length)

    buffer = decode_upload(request.stream, settings.max_upload_bytes)
    logger.debug("Decoded %dx%d image", buffer.width, buffer.height)

    normalize_geometry(buffer, settings.target_height, settings.max_ratio)
    logger.debug("Normalized geometry to %dx%d", buffer.width, buffer.height)

    flattened = flatten_onto_white(buffer)
    attempt = encoder.fit_to_budget(flattened, settings.target_max_bytes)
    logger.debug("Encoded JPEG at quality %d (%d bytes)", attempt.quality, attempt.byte_length)

    relative_path = store.save(attempt.data)
    store.retire(request.previous_relative_path)

    logger.info(
        "Stored %dx%d photo at %s (quality %d, %d bytes)",
        flattened.width,
        flattened.height,
        relative_path,
        attempt.quality,
        attempt.byte_length,
    )
    return relative_path


def process_upload(
    request: UploadRequest,
    settings: PhotoSettings | None = None,
    store: PhotoStore | None = None,
) -> ProcessResult:
    """
    Turn an uploaded image into a stored, size-bounded JPEG.

    Never raises: every rejection or fault comes back as a failed result with
    a message that is safe to show to the user.
    """
    settings = settings or get_settings()
    store = store or get_photo_store(settings)

    try:
        relative_path = _run(request, settings, store)
    except PhotoProcessingError as exc:
        logger.info("Photo upload rejected (%s): %s", exc.kind.value, exc.message)
        return ProcessResult.failed(exc.kind, exc.message)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected failure while processing photo upload")
        return ProcessResult.failed(FailureKind.PROCESSING_FAILED, "Image processing failed.")

    return ProcessResult.ok(relative_path)
