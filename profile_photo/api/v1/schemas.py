from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Reasons a photo upload can be rejected."""

    EMPTY_UPLOAD = "empty_upload"
    TOO_LARGE = "too_large"
    NOT_AN_IMAGE = "not_an_image"
    UNSUPPORTED_FORMAT = "unsupported_format"
    DECODE_ERROR = "decode_error"
    IMAGE_TOO_SMALL = "image_too_small"
    COMPRESSION_BUDGET_EXCEEDED = "compression_budget_exceeded"
    STORAGE_WRITE_FAILED = "storage_write_failed"
    PROCESSING_FAILED = "processing_failed"


class PhotoUploadResponse(BaseModel):
    """Outcome of a profile photo upload."""

    success: bool = Field(..., description="Whether the new photo was stored.")
    relative_path: str | None = Field(
        default=None,
        description="Storage-relative path of the stored JPEG, e.g. '/appdata/member/photo/<id>.jpg'.",
    )
    error_message: str | None = Field(
        default=None,
        description="Short user-presentable reason when the upload was rejected.",
    )
    failure: FailureKind | None = Field(
        default=None,
        description="Machine-readable failure kind, present only when success is false.",
    )
