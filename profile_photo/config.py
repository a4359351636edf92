"""
Runtime settings for the photo ingestion service.

Values come from environment variables (a `.env` file is loaded by
`profile_photo.main` at start-up):

    PHOTO_STORAGE_ROOT: Web root under which photos are stored
        (default 'storage/wwwroot').
    PHOTO_RELATIVE_DIR: Fixed photo folder below the root, written with
        forward slashes (default '/appdata/member/photo').
    PHOTO_TARGET_HEIGHT: Output height in pixels (default 160).
    PHOTO_MAX_RATIO: Widest width:height ratio kept before cropping
        (default 6.0).
    PHOTO_TARGET_MAX_BYTES: Byte budget of the stored JPEG (default 100000).
    PHOTO_MAX_UPLOAD_BYTES: Largest accepted upload (default 5242880).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_STORAGE_ROOT = "storage/wwwroot"
DEFAULT_RELATIVE_DIR = "/appdata/member/photo"
DEFAULT_TARGET_HEIGHT = 160
DEFAULT_MAX_RATIO = 6.0
DEFAULT_TARGET_MAX_BYTES = 100_000
DEFAULT_MAX_UPLOAD_BYTES = 5_242_880  # 5MB


@dataclass(frozen=True, slots=True)
class PhotoSettings:
    storage_root: Path = Path(DEFAULT_STORAGE_ROOT)
    relative_dir: str = DEFAULT_RELATIVE_DIR
    target_height: int = DEFAULT_TARGET_HEIGHT
    max_ratio: float = DEFAULT_MAX_RATIO
    target_max_bytes: int = DEFAULT_TARGET_MAX_BYTES
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def validate(self) -> PhotoSettings:
        """Raise ValueError if any setting is unusable; return self otherwise."""
        if self.target_height <= 0:
            raise ValueError("PHOTO_TARGET_HEIGHT must be positive")
        if self.max_ratio <= 0:
            raise ValueError("PHOTO_MAX_RATIO must be positive")
        if self.target_max_bytes <= 0:
            raise ValueError("PHOTO_TARGET_MAX_BYTES must be positive")
        if self.max_upload_bytes <= 0:
            raise ValueError("PHOTO_MAX_UPLOAD_BYTES must be positive")
        parts = [part for part in self.relative_dir.split("/") if part]
        if not parts or any(part in (".", "..") for part in parts):
            raise ValueError("PHOTO_RELATIVE_DIR must name a folder below the storage root")
        return self

    @classmethod
    def from_env(cls) -> PhotoSettings:
        return cls(
            storage_root=Path(os.getenv("PHOTO_STORAGE_ROOT", DEFAULT_STORAGE_ROOT)),
            relative_dir=os.getenv("PHOTO_RELATIVE_DIR", DEFAULT_RELATIVE_DIR),
            target_height=int(os.getenv("PHOTO_TARGET_HEIGHT", str(DEFAULT_TARGET_HEIGHT))),
            max_ratio=float(os.getenv("PHOTO_MAX_RATIO", str(DEFAULT_MAX_RATIO))),
            target_max_bytes=int(os.getenv("PHOTO_TARGET_MAX_BYTES", str(DEFAULT_TARGET_MAX_BYTES))),
            max_upload_bytes=int(os.getenv("PHOTO_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
        ).validate()


@lru_cache(maxsize=1)
def get_settings() -> PhotoSettings:
    """
    Return the process-wide settings.

    Cached so every request sees the same values; tests call
    `get_settings.cache_clear()` after changing the environment.
    """
    return PhotoSettings.from_env()
