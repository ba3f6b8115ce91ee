"""Grayscale conversion and contrast/brightness adjustment.

Both steps work on the colour channels of an L, RGB or RGBA array and
leave any alpha channel untouched. Channel order is RGB, as produced by
:func:`cccd_ocr.preprocessing.codec.decode_image`.
"""

import numpy as np

from cccd_ocr.utils.logger import get_logger

logger = get_logger(__name__)

# ITU-R BT.601 luma weights.
_LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round non-negative values with halves going up, like ``Math.round``."""
    return np.floor(values + 0.5)


def _check_layout(image: np.ndarray) -> None:
    if image.ndim == 2:
        return
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported image layout: shape={image.shape}")


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Replace every colour channel with the pixel's luma.

    The result keeps the input's channel count, so RGBA stays RGBA with
    three equal colour channels. Applying it twice gives the same result
    as applying it once.

    Args:
        image: ``uint8`` array in L, RGB or RGBA layout.

    Returns:
        New array with ``gray = round(0.299 R + 0.587 G + 0.114 B)`` in
        each colour channel.
    """
    _check_layout(image)
    if image.ndim == 2:
        return image.copy()

    rgb = image[..., :3].astype(np.float64)
    r_weight, g_weight, b_weight = _LUMA_WEIGHTS
    luma = r_weight * rgb[..., 0] + g_weight * rgb[..., 1] + b_weight * rgb[..., 2]
    gray = np.clip(round_half_up(luma), 0, 255).astype(np.uint8)

    result = image.copy()
    for channel in range(3):
        result[..., channel] = gray
    return result


def adjust_contrast_brightness(
    image: np.ndarray, contrast_factor: float = 1.3, brightness_factor: float = 1.1
) -> np.ndarray:
    """Scale colour channels by a contrast factor, then a brightness factor.

    Each step is rounded and clamped to ``[0, 255]`` on its own, so a
    value saturated by the contrast step stays at 255.

    Args:
        image: ``uint8`` array in L, RGB or RGBA layout.
        contrast_factor: Multiplier applied first.
        brightness_factor: Multiplier applied to the contrast result.

    Returns:
        New adjusted array of the same shape.
    """
    _check_layout(image)
    colour = image if image.ndim == 2 else image[..., :3]

    values = np.clip(round_half_up(colour.astype(np.float64) * contrast_factor), 0, 255)
    values = np.clip(round_half_up(values * brightness_factor), 0, 255)

    result = image.copy()
    if image.ndim == 2:
        result[...] = values.astype(np.uint8)
    else:
        result[..., :3] = values.astype(np.uint8)
    logger.debug(
        "Applied contrast x%.2f, brightness x%.2f", contrast_factor, brightness_factor
    )
    return result
