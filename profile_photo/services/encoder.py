"""
JPEG encoding with an adaptive quality search.

`fit_to_budget` starts at quality 80 and walks quality down until the encoded
photo fits the byte budget. Each step scales quality by budget / size; when
that estimate does not lower quality (JPEG size is not linear in quality) the
step is forced to quality - 10. The search never goes below quality 30 and
stops after 6 refinements.
"""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image

from profile_photo.models.photos import EncodingAttempt
from profile_photo.services.errors import CompressionBudgetExceededError

logger = logging.getLogger(__name__)

INITIAL_QUALITY = 80
QUALITY_FLOOR = 30
MAX_QUALITY = 100
MAX_REFINEMENTS = 6
FORCED_STEP = 10


def encode_jpeg(image: Image.Image, quality: int) -> EncodingAttempt:
    if not QUALITY_FLOOR <= quality <= MAX_QUALITY:
        raise ValueError(f"JPEG quality must be within [{QUALITY_FLOOR}, {MAX_QUALITY}], got {quality}")
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return EncodingAttempt(quality=quality, data=buffer.getvalue())


def next_quality(quality: int, current_size: int, target_max_bytes: int) -> int:
    """Propose the next quality from the size overshoot, forcing progress on a stall."""
    factor = target_max_bytes / current_size
    proposal = max(QUALITY_FLOOR, round(quality * factor))
    if proposal >= quality:
        proposal = max(QUALITY_FLOOR, quality - FORCED_STEP)
    return proposal


def fit_to_budget(
    image: Image.Image,
    target_max_bytes: int,
    initial_quality: int = INITIAL_QUALITY,
) -> EncodingAttempt:
    """
    Encode `image` at the highest quality the search reaches within budget.

    Raises:
        CompressionBudgetExceededError: The last attempt is still larger than
            `target_max_bytes`.
    """
    attempt = encode_jpeg(image, initial_quality)

    if attempt.byte_length > target_max_bytes:
        for _ in range(MAX_REFINEMENTS):
            if attempt.byte_length <= target_max_bytes:
                break
            quality = next_quality(attempt.quality, attempt.byte_length, target_max_bytes)
            logger.debug(
                "JPEG at quality %d is %d bytes (budget %d); retrying at %d",
                attempt.quality,
                attempt.byte_length,
                target_max_bytes,
                quality,
            )
            attempt = encode_jpeg(image, quality)
            if quality <= QUALITY_FLOOR:
                break

    if attempt.byte_length > target_max_bytes:
        raise CompressionBudgetExceededError(
            f"Unable to compress image below {target_max_bytes // 1024} KB."
        )
    return attempt
