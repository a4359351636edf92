"""
HTTP-level tests for the Profile Photo API.

Uses FastAPI's TestClient with the settings and photo store dependencies
overridden so uploads land in a temporary directory.
"""

import logging
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from profile_photo.config import PhotoSettings, get_settings
from profile_photo.main import create_app
from profile_photo.services.storage import get_photo_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def settings(tmp_path):
    return PhotoSettings(storage_root=tmp_path / "wwwroot")


@pytest.fixture
def store(settings):
    return get_photo_store(settings)


@pytest.fixture
def client(settings):
    app = create_app()
    # The photo store is derived from the overridden settings.
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


def _png(size, color="orange"):
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "ok"}
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["api_version"] == "v1"


def test_upload_and_replace_photo(client, store):
    response = client.post("/api/v1/photos", files={"photo": ("me.png", _png((640, 480)), "image/png")})
    assert response.status_code == 201, response.text
    first = response.json()
    assert first["success"] is True
    assert first["error_message"] is None
    assert first["failure"] is None
    first_file = store.photo_dir / first["relative_path"].rsplit("/", 1)[1]
    assert first_file.exists()

    response = client.post(
        "/api/v1/photos",
        files={"photo": ("me2.png", _png((800, 400), "navy"), "image/png")},
        data={"previous_path": first["relative_path"]},
    )
    assert response.status_code == 201, response.text
    second = response.json()
    assert second["relative_path"] != first["relative_path"]
    assert not first_file.exists()
    logger.info("✓ Replaced %s with %s", first["relative_path"], second["relative_path"])


def test_small_image_is_unprocessable(client, store):
    response = client.post("/api/v1/photos", files={"photo": ("tiny.png", _png((4000, 100)), "image/png")})
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["relative_path"] is None
    assert body["failure"] == "image_too_small"
    assert body["error_message"] == "Image height must be at least 160px."
    assert not store.photo_dir.exists()


def test_non_image_is_unsupported_media_type(client):
    response = client.post("/api/v1/photos", files={"photo": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 415
    assert response.json()["failure"] == "not_an_image"


def test_empty_upload(client):
    response = client.post("/api/v1/photos", files={"photo": ("empty.png", b"", "image/png")})
    assert response.status_code == 422
    assert response.json()["failure"] == "empty_upload"


def test_upload_larger_than_limit(tmp_path):
    settings = PhotoSettings(storage_root=tmp_path / "wwwroot", max_upload_bytes=1024 * 1024)
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    client = TestClient(app)

    response = client.post("/api/v1/photos", files={"photo": ("big.png", b"\0" * (1024 * 1024 + 1), "image/png")})
    assert response.status_code == 413
    assert response.json()["error_message"] == "File too large. Maximum allowed upload: 1 MB."
