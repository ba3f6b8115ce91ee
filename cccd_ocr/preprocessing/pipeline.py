"""OCR image enhancement pipeline for CCCD photos.

Runs resize, grayscale, contrast/brightness and sharpening in order and
tracks quality metrics before and after. Enhancement only improves
recognition odds; it is never required for correctness, so a failure
at any step is reported as an :class:`EnhancementDegraded` value and the
caller keeps the original image.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from cccd_ocr.utils.config import EnhancementConfig
from cccd_ocr.utils.logger import get_logger

from .codec import decode_image
from .resize import resize_for_ocr
from .sharpen import sharpen
from .tone import adjust_contrast_brightness, to_grayscale

logger = get_logger(__name__)


class EnhancementDegraded(Exception):
    """Enhancement could not run; the original image should be used.

    Carried inside :class:`EnhancementResult` rather than raised.

    Args:
        message: Short description of what failed.
        cause: The underlying error, if any.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


@dataclass
class EnhancementResult:
    """Outcome of one enhancement attempt.

    Exactly one of ``image`` and ``degraded`` is set when enhancement ran;
    both are ``None`` when enhancement is disabled.
    """

    image: np.ndarray | None = None
    degraded: EnhancementDegraded | None = None
    metrics: QualityMetrics | None = None

    @property
    def ok(self) -> bool:
        """Whether an enhanced image was produced."""
        return self.image is not None

    def unwrap_or(self, original: np.ndarray | bytes) -> np.ndarray | bytes:
        """Return the enhanced image, or ``original`` if there is none."""
        if self.image is not None:
            return self.image
        return original


def _to_gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return image
    code = cv2.COLOR_RGBA2GRAY if image.shape[2] == 4 else cv2.COLOR_RGB2GRAY
    return cv2.cvtColor(image, code)


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (L, RGB or RGBA).

    Returns:
        Sharpness score (higher means sharper).
    """
    return float(cv2.Laplacian(_to_gray(image), cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate contrast as the standard deviation of gray intensities."""
    return float(_to_gray(image).std())


def _check_input(image: np.ndarray) -> None:
    if not isinstance(image, np.ndarray):
        raise TypeError(f"Expected numpy array, got {type(image).__name__}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixels, got {image.dtype}")
    if image.size == 0:
        raise ValueError("Image is empty")
    if image.ndim not in (2, 3) or (image.ndim == 3 and image.shape[2] not in (3, 4)):
        raise ValueError(f"Unsupported image layout: shape={image.shape}")


class ImageEnhancer:
    """Prepares a card photo for text recognition.

    Args:
        config: Enhancement settings (size bounds, factors, kernel).
    """

    def __init__(self, config: EnhancementConfig | None = None) -> None:
        self.config = config or EnhancementConfig()

    def try_enhance(self, source: np.ndarray | bytes) -> EnhancementResult:
        """Enhance an image, reporting failure as a value.

        Args:
            source: Pixel array, or encoded image bytes to decode first.

        Returns:
            Result holding the enhanced image, or the degradation reason.
        """
        if not self.config.enabled:
            logger.debug("Image enhancement disabled")
            return EnhancementResult()

        try:
            if isinstance(source, (bytes, bytearray)):
                image = decode_image(bytes(source))
            else:
                image = source
            enhanced, metrics = self._apply(image)
        except Exception as exc:
            logger.warning("Image enhancement failed, using original image: %s", exc)
            return EnhancementResult(
                degraded=EnhancementDegraded(f"Image enhancement failed: {exc}", exc)
            )

        return EnhancementResult(image=enhanced, metrics=metrics)

    def enhance(self, source: np.ndarray | bytes) -> np.ndarray | bytes:
        """Enhance an image, falling back to ``source`` on any failure."""
        return self.try_enhance(source).unwrap_or(source)

    def _apply(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run every enhancement step on a decoded image."""
        _check_input(image)
        cfg = self.config

        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            contrast_before=calculate_contrast(image),
            sharpness_after=0.0,
            contrast_after=0.0,
        )

        result = resize_for_ocr(image, cfg.max_dimension, cfg.min_dimension)
        result = to_grayscale(result)
        result = adjust_contrast_brightness(
            result, cfg.contrast_factor, cfg.brightness_factor
        )
        result = sharpen(result, cfg.sharpen_kernel)

        metrics.sharpness_after = calculate_sharpness(result)
        metrics.contrast_after = calculate_contrast(result)

        logger.info(
            "Enhanced %dx%d -> %dx%d: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            image.shape[1],
            image.shape[0],
            result.shape[1],
            result.shape[0],
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
