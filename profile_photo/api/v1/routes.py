import os

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from profile_photo.api.v1.schemas import FailureKind, PhotoUploadResponse
from profile_photo.config import PhotoSettings, get_settings
from profile_photo.models.photos import UploadRequest
from profile_photo.services.pipeline import process_upload
from profile_photo.services.storage import PhotoStore, get_photo_store

router = APIRouter(prefix="/api/v1")

_FAILURE_STATUS = {
    FailureKind.TOO_LARGE: 413,
    FailureKind.NOT_AN_IMAGE: 415,
    FailureKind.UNSUPPORTED_FORMAT: 415,
    FailureKind.STORAGE_WRITE_FAILED: 500,
    FailureKind.PROCESSING_FAILED: 500,
}


def _photo_store(settings: PhotoSettings = Depends(get_settings)) -> PhotoStore:
    """Store matching the settings injected for this request."""
    return get_photo_store(settings)


def _declared_length(upload: UploadFile) -> int:
    """Size reported for the upload, measured from the spooled file when unknown."""
    if upload.size is not None:
        return upload.size
    position = upload.file.tell()
    upload.file.seek(0, os.SEEK_END)
    length = upload.file.tell()
    upload.file.seek(position)
    return length


@router.get("/health", tags=["health"])
async def health_check() -> dict:
    """API v1 health check endpoint."""
    return {"status": "ok", "api_version": "v1"}


@router.post(
    "/photos",
    response_model=PhotoUploadResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["photos"],
    summary="Upload a new profile photo",
)
async def upload_photo(
    response: Response,
    photo: UploadFile = File(..., description="Image to use as the profile photo."),
    previous_path: str | None = Form(
        default=None,
        description="Storage-relative path of the photo being replaced, if any.",
    ),
    settings: PhotoSettings = Depends(get_settings),
    store: PhotoStore = Depends(_photo_store),
) -> PhotoUploadResponse:
    """
    Normalize an uploaded image and store it as a profile photo.

    The client sends multipart/form-data with:
    - `photo`: the image file (any format Pillow can read).
    - `previous_path`: optional path returned by an earlier upload; that file
      is deleted once the new photo is stored.

    The stored photo is a JPEG exactly `PHOTO_TARGET_HEIGHT` pixels tall and
    at most `PHOTO_TARGET_MAX_BYTES` bytes. The caller is expected to record
    the returned `relative_path` against its own user record.
    """
    request = UploadRequest(
        stream=photo.file,
        content_type=photo.content_type,
        declared_length=_declared_length(photo),
        previous_relative_path=previous_path,
    )
    # The pipeline reads, writes and deletes files; keep it off the event loop.
    result = await run_in_threadpool(process_upload, request, settings, store)

    if not result.success:
        response.status_code = _FAILURE_STATUS.get(result.failure, 422)

    return PhotoUploadResponse(
        success=result.success,
        relative_path=result.relative_path,
        error_message=result.error_message,
        failure=result.failure,
    )
