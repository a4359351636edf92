"""
Geometric normalization of decoded photos.

Every accepted photo ends up exactly `target_height` pixels tall. Very wide
images are first center-cropped so that width / height never exceeds
`max_ratio`, which also bounds the output width to `max_ratio * target_height`.
"""

from __future__ import annotations

import logging
from typing import Tuple

from PIL import Image

from profile_photo.models.photos import PixelBuffer
from profile_photo.services.errors import ImageTooSmallError

logger = logging.getLogger(__name__)

CropBox = Tuple[int, int, int, int]


def ensure_min_height(buffer: PixelBuffer, target_height: int) -> None:
    # Checked before any transform so small images are never upscaled.
    if buffer.height < target_height:
        raise ImageTooSmallError(f"Image height must be at least {target_height}px.")


def compute_center_crop(width: int, height: int, max_ratio: float) -> CropBox | None:
    """
    Return the (left, upper, right, lower) box that caps the aspect ratio.

    Returns None when `width / height` is already within `max_ratio`.
    """
    if width / height <= max_ratio:
        return None
    new_width = round(height * max_ratio)
    crop_x = (width - new_width) // 2
    return (crop_x, 0, crop_x + new_width, height)


def clamp_aspect_ratio(buffer: PixelBuffer, max_ratio: float) -> CropBox | None:
    box = compute_center_crop(buffer.width, buffer.height, max_ratio)
    if box is not None:
        logger.debug("Cropping %dx%d image to box %s", buffer.width, buffer.height, box)
        buffer.image = buffer.image.crop(box)
    return box


def resize_to_height(buffer: PixelBuffer, target_height: int) -> None:
    """Scale to `target_height` keeping the aspect ratio (bicubic)."""
    resize_width = max(1, round(buffer.width * (target_height / buffer.height)))
    size = (resize_width, target_height)
    if buffer.size != size:
        buffer.image = buffer.image.resize(size, Image.Resampling.BICUBIC)


def normalize_geometry(buffer: PixelBuffer, target_height: int, max_ratio: float) -> PixelBuffer:
    ensure_min_height(buffer, target_height)
    clamp_aspect_ratio(buffer, max_ratio)
    resize_to_height(buffer, target_height)
    return buffer
