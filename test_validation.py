"""
Tests for upload metadata validation, decoding and settings.

Validation must reject obviously bad uploads before any bytes are decoded,
so most tests hand over a stream that would fail loudly if it were read.
"""

import logging
from io import BytesIO

import pytest
from PIL import Image

from profile_photo.api.v1.schemas import FailureKind
from profile_photo.config import PhotoSettings, get_settings
from profile_photo.models.photos import UploadRequest
from profile_photo.services.decoder import decode_upload
from profile_photo.services.errors import (
    EmptyUploadError,
    ImageDecodeError,
    NotAnImageError,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from profile_photo.services.validation import validate_upload

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MAX_UPLOAD = 5_242_880


class ExplodingStream:
    """Stream that fails the test if anything tries to read it."""

    def read(self, *args):
        raise AssertionError("validation must not read the upload stream")


def _request(declared_length=1024, content_type="image/png", stream=None):
    return UploadRequest(
        stream=stream if stream is not None else ExplodingStream(),
        content_type=content_type,
        declared_length=declared_length,
    )


def _png_bytes(size=(200, 200), mode="RGBA"):
    buf = BytesIO()
    Image.new(mode, size, (10, 20, 30, 255) if mode == "RGBA" else (10, 20, 30)).save(buf, format="PNG")
    return buf.getvalue()


def test_missing_stream_is_empty_upload():
    request = UploadRequest(stream=None, content_type="image/png", declared_length=10)
    with pytest.raises(EmptyUploadError) as excinfo:
        validate_upload(request, MAX_UPLOAD)
    assert excinfo.value.message == "No file provided."


@pytest.mark.parametrize("declared_length", [0, -1])
def test_non_positive_length_is_empty_upload(declared_length):
    with pytest.raises(EmptyUploadError) as excinfo:
        validate_upload(_request(declared_length=declared_length), MAX_UPLOAD)
    assert excinfo.value.kind is FailureKind.EMPTY_UPLOAD


def test_six_megabyte_upload_rejected_before_decode():
    with pytest.raises(UploadTooLargeError) as excinfo:
        validate_upload(_request(declared_length=6 * 1024 * 1024), MAX_UPLOAD)
    assert excinfo.value.message == "File too large. Maximum allowed upload: 5 MB."
    logger.info("✓ 6MB upload rejected without reading the stream")


def test_length_at_limit_is_accepted():
    validate_upload(_request(declared_length=MAX_UPLOAD), MAX_UPLOAD)


@pytest.mark.parametrize("content_type", [None, "", "   ", "application/pdf", "text/plain", "imagepng"])
def test_non_image_content_type_rejected(content_type):
    with pytest.raises(NotAnImageError):
        validate_upload(_request(content_type=content_type), MAX_UPLOAD)


@pytest.mark.parametrize("content_type", ["image/png", "IMAGE/JPEG", "Image/Webp"])
def test_image_content_type_is_case_insensitive(content_type):
    validate_upload(_request(content_type=content_type), MAX_UPLOAD)


def test_decode_returns_rgba_buffer():
    buffer = decode_upload(BytesIO(_png_bytes(size=(320, 180), mode="RGB")), MAX_UPLOAD)
    assert buffer.size == (320, 180)
    assert buffer.image.mode == "RGBA"
    assert len(buffer.image.tobytes()) == 320 * 180 * 4


def test_decode_rejects_unknown_format():
    with pytest.raises(UnsupportedFormatError) as excinfo:
        decode_upload(BytesIO(b"definitely not an image" * 10), MAX_UPLOAD)
    assert excinfo.value.message == "Unknown or unsupported image format."


def test_decode_reports_truncated_image_without_internal_details():
    buf = BytesIO()
    Image.effect_noise((400, 400), 64).convert("RGBA").save(buf, format="PNG")
    data = buf.getvalue()
    with pytest.raises(ImageDecodeError) as excinfo:
        decode_upload(BytesIO(data[: len(data) // 2]), MAX_UPLOAD)
    assert excinfo.value.message == "Image could not be decoded."


def test_decode_uses_actual_length_over_declared_length():
    data = _png_bytes()
    with pytest.raises(UploadTooLargeError):
        decode_upload(BytesIO(data), len(data) - 1)


def test_decode_rejects_empty_stream():
    with pytest.raises(EmptyUploadError):
        decode_upload(BytesIO(b""), MAX_UPLOAD)


def test_settings_defaults_and_env(monkeypatch, tmp_path):
    defaults = PhotoSettings()
    assert defaults.target_height == 160
    assert defaults.max_ratio == 6.0
    assert defaults.target_max_bytes == 100_000
    assert defaults.max_upload_bytes == 5_242_880
    assert defaults.relative_dir == "/appdata/member/photo"

    monkeypatch.setenv("PHOTO_STORAGE_ROOT", str(tmp_path))
    monkeypatch.setenv("PHOTO_TARGET_HEIGHT", "200")
    monkeypatch.setenv("PHOTO_MAX_RATIO", "4.5")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.storage_root == tmp_path
        assert settings.target_height == 200
        assert settings.max_ratio == 4.5
    finally:
        get_settings.cache_clear()


@pytest.mark.parametrize(
    "overrides",
    [
        {"target_height": 0},
        {"max_ratio": -1.0},
        {"target_max_bytes": 0},
        {"max_upload_bytes": 0},
        {"relative_dir": "/"},
        {"relative_dir": "/appdata/../.."},
    ],
)
def test_settings_validation_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        PhotoSettings(**overrides).validate()
