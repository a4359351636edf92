from __future__ import annotations

import numpy as np
from PIL import Image

from profile_photo.models.photos import PixelBuffer

WHITE = 255.0


def flatten_onto_white(buffer: PixelBuffer) -> Image.Image:
    """
    Alpha-blend the buffer over an opaque white background.

    JPEG has no alpha channel, so transparent regions must become white
    rather than whatever color the encoder would otherwise pick.

    Returns:
        A new RGB image with the same dimensions. It is handed straight to the
        JPEG encoder and is not wrapped in a PixelBuffer, which is RGBA-only.
    """
    rgba = np.asarray(buffer.image, dtype=np.float32)
    alpha = rgba[:, :, 3] / 255.0
    background = np.full(rgba.shape[:2] + (3,), WHITE, dtype=np.float32)

    # Alpha blend: output = source * alpha + background * (1 - alpha)
    flattened = np.empty_like(background)
    for c in range(3):
        flattened[:, :, c] = rgba[:, :, c] * alpha + background[:, :, c] * (1 - alpha)

    pixels = np.clip(np.rint(flattened), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels)
