"""Edge sharpening for text regions of a card photo."""

import cv2
import numpy as np

from cccd_ocr.utils.config import DEFAULT_SHARPEN_KERNEL
from cccd_ocr.utils.logger import get_logger

from .tone import round_half_up

logger = get_logger(__name__)


def sharpen(
    image: np.ndarray, kernel: list[list[float]] | np.ndarray | None = None
) -> np.ndarray:
    """Convolve the colour channels with a 3x3 sharpening kernel.

    Only interior pixels are filtered. The outermost one-pixel ring keeps
    its input values, and alpha is copied through unchanged.

    Args:
        image: ``uint8`` array in L, RGB or RGBA layout.
        kernel: 3x3 kernel. Defaults to the gentle text-sharpening kernel
            ``[[0, -0.5, 0], [-0.5, 3, -0.5], [0, -0.5, 0]]``.

    Returns:
        New sharpened array, each value rounded and clamped to ``[0, 255]``.

    Raises:
        ValueError: If the kernel is not 3x3.
    """
    weights = np.asarray(
        DEFAULT_SHARPEN_KERNEL if kernel is None else kernel, dtype=np.float32
    )
    if weights.shape != (3, 3):
        raise ValueError(f"Sharpen kernel must be 3x3, got {weights.shape}")

    result = image.copy()
    height, width = image.shape[:2]
    if height < 3 or width < 3:
        logger.debug("Image %dx%d too small to sharpen", width, height)
        return result

    colour = image if image.ndim == 2 else image[..., :3]
    filtered = cv2.filter2D(colour.astype(np.float32), -1, weights)
    filtered = np.clip(round_half_up(filtered), 0, 255).astype(np.uint8)

    if image.ndim == 2:
        result[1:-1, 1:-1] = filtered[1:-1, 1:-1]
    else:
        result[1:-1, 1:-1, :3] = filtered[1:-1, 1:-1]
    return result
