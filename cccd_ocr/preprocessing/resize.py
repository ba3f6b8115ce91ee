"""Resizing of card photos into the size range Tesseract reads best.

Very large phone photos are slow to recognize and gain nothing; very
small crops leave glyphs only a few pixels tall. Both are brought into
``[min_dimension, max_dimension]`` with the aspect ratio kept.
"""

import cv2
import numpy as np

from cccd_ocr.utils.logger import get_logger

logger = get_logger(__name__)


def compute_target_size(
    width: int, height: int, max_dimension: int, min_dimension: int
) -> tuple[int, int]:
    """Compute the output size for an image.

    Images with a side above ``max_dimension`` shrink until neither side
    exceeds it. Images with both sides below ``min_dimension`` grow until
    the shorter side reaches it, unless that would push the longer side
    past ``max_dimension``, which always wins. Anything else keeps its size.

    Args:
        width: Source width in pixels.
        height: Source height in pixels.
        max_dimension: Upper bound for either side.
        min_dimension: Target for the shorter side of small images.

    Returns:
        ``(width, height)`` of the resized image.

    Raises:
        ValueError: If the source has a zero or negative side.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {width}x{height}")

    if width > max_dimension or height > max_dimension:
        scale = min(max_dimension / width, max_dimension / height)
    elif width < min_dimension and height < min_dimension:
        scale = min(
            min_dimension / min(width, height),
            max_dimension / max(width, height),
        )
    else:
        return width, height

    new_width = min(max(1, round(width * scale)), max_dimension)
    new_height = min(max(1, round(height * scale)), max_dimension)
    return new_width, new_height


def resize_for_ocr(
    image: np.ndarray, max_dimension: int = 2500, min_dimension: int = 800
) -> np.ndarray:
    """Resize an image into the OCR-friendly size range.

    Args:
        image: Input image (L, RGB or RGBA).
        max_dimension: Upper bound for either side.
        min_dimension: Target for the shorter side of small images.

    Returns:
        A new array; a copy of the input when no resize is needed.
    """
    height, width = image.shape[:2]
    new_width, new_height = compute_target_size(
        width, height, max_dimension, min_dimension
    )

    if (new_width, new_height) == (width, height):
        return image.copy()

    shrinking = new_width * new_height < width * height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
    result = cv2.resize(image, (new_width, new_height), interpolation=interpolation)
    logger.debug(
        "Resized %dx%d -> %dx%d", width, height, new_width, new_height
    )
    return result
