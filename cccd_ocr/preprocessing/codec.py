"""Decoding of uploaded card photos and lossless re-encoding.

Photos arrive as raw bytes in whatever format the phone produced. They
are decoded with Pillow into ``uint8`` arrays in RGB, RGBA or L layout,
with EXIF orientation applied so portrait shots are not fed sideways to
the recognizer.
"""

import io

import numpy as np
from PIL import Image, ImageOps

from cccd_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_NATIVE_MODES = ("L", "RGB", "RGBA")


def _normalize_mode(img: Image.Image) -> Image.Image:
    """Convert palette, CMYK, LA and high bit-depth images to L/RGB/RGBA."""
    if img.mode in _NATIVE_MODES:
        return img
    has_alpha = "A" in img.getbands() or "transparency" in img.info
    target = "RGBA" if has_alpha else "RGB"
    logger.debug("Converting image mode %s to %s", img.mode, target)
    return img.convert(target)


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes into a pixel array.

    Args:
        data: Encoded image (JPEG, PNG, WebP, ...).

    Returns:
        ``uint8`` array of shape ``(H, W)``, ``(H, W, 3)`` or ``(H, W, 4)``.

    Raises:
        PIL.UnidentifiedImageError: If Pillow cannot identify the format.
        OSError: If the data is truncated or corrupt.
    """
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        oriented = ImageOps.exif_transpose(img)
        return np.array(_normalize_mode(oriented))


def encode_png(image: np.ndarray) -> bytes:
    """Encode a pixel array as PNG.

    PNG is lossless, so the enhanced pixels reach the recognizer without
    new compression artifacts.

    Args:
        image: ``uint8`` array in L, RGB or RGBA layout.

    Returns:
        PNG-encoded bytes.
    """
    buffer = io.BytesIO()
    Image.fromarray(image).save(buffer, format="PNG")
    return buffer.getvalue()
