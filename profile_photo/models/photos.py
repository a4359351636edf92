from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from PIL import Image

from profile_photo.api.v1.schemas import FailureKind


@dataclass(frozen=True, slots=True)
class UploadRequest:
    """
    A single upload as handed over by the caller.

    `declared_length` is what the client claimed; the decoder re-checks the
    number of bytes it actually reads.
    """

    stream: BinaryIO | None
    content_type: str | None
    declared_length: int
    # Storage-relative path of the photo this upload replaces, if any.
    previous_relative_path: str | None = None


@dataclass(slots=True)
class PixelBuffer:
    """
    Decoded image owned by one pipeline run.

    The wrapped Pillow image is always kept in RGBA mode. Geometry stages
    swap `image` for the transformed result instead of allocating a new
    buffer.
    """

    image: Image.Image

    def __post_init__(self) -> None:
        if self.image.mode != "RGBA":
            self.image = self.image.convert("RGBA")

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True, slots=True)
class EncodingAttempt:
    """One JPEG encode produced while searching for a quality that fits the budget."""

    quality: int
    data: bytes

    @property
    def byte_length(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """
    The only value returned to the caller.

    Exactly one of `relative_path` / `error_message` is set, depending on
    `success`.
    """

    success: bool
    relative_path: str | None = None
    error_message: str | None = None
    failure: FailureKind | None = None

    def __post_init__(self) -> None:
        if self.success:
            if self.relative_path is None or self.error_message is not None or self.failure is not None:
                raise ValueError("A successful result carries a path and nothing else.")
        elif self.relative_path is not None or self.error_message is None or self.failure is None:
            raise ValueError("A failed result carries a failure kind and a message, never a path.")

    @classmethod
    def ok(cls, relative_path: str) -> ProcessResult:
        return cls(success=True, relative_path=relative_path)

    @classmethod
    def failed(cls, failure: FailureKind, message: str) -> ProcessResult:
        return cls(success=False, error_message=message, failure=failure)
