"""End-to-end CCCD extraction pipeline.

Enhances the card photo, recognizes its text and extracts the holder's
fields. Enhancement problems never reach the caller; a recognition
failure on both the enhanced and the original image is the only error
a caller can see.
"""

from collections.abc import Callable

import numpy as np

from cccd_ocr.extraction.cccd_extractor import CCCDExtractor, CCCDInfo, ExtractionReport
from cccd_ocr.preprocessing.codec import encode_png
from cccd_ocr.preprocessing.pipeline import ImageEnhancer
from cccd_ocr.utils.config import AppConfig
from cccd_ocr.utils.logger import get_logger

from .tesseract_engine import TesseractRecognizer, TextRecognizer, recognizer_session

logger = get_logger(__name__)


class RecognitionFailed(Exception):
    """Text recognition failed for both the enhanced and original image.

    Args:
        message: Description of the failure.
        cause: The last error raised by the recognizer.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CCCDProcessor:
    """Runs enhancement, recognition and field extraction for one card.

    Each call opens its own recognizer session, so one processor can
    serve concurrent calls for independent uploads.

    Args:
        config: Application configuration object.
        enhancer: Image enhancer; built from ``config`` if omitted.
        extractor: Field extractor; built from ``config`` if omitted.
        recognizer_factory: Builds a fresh recognizer per call; defaults
            to a :class:`TesseractRecognizer` from ``config.ocr``.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        enhancer: ImageEnhancer | None = None,
        extractor: CCCDExtractor | None = None,
        recognizer_factory: Callable[[], TextRecognizer] | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.enhancer = enhancer or ImageEnhancer(self.config.enhancement)
        self.extractor = extractor or CCCDExtractor(self.config.extraction)
        self.recognizer_factory = recognizer_factory or self._default_recognizer

    def _default_recognizer(self) -> TextRecognizer:
        return TesseractRecognizer(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            lang=self.config.ocr.lang,
            psm=self.config.ocr.psm,
        )

    async def process(self, source: np.ndarray | bytes) -> CCCDInfo:
        """Extract CCCD fields from a card photo.

        Args:
            source: Encoded image bytes or a ``uint8`` pixel array.

        Returns:
            The extracted fields, possibly all empty.

        Raises:
            RecognitionFailed: If text recognition failed.
        """
        report = await self.process_report(source)
        return report.info

    async def process_report(self, source: np.ndarray | bytes) -> ExtractionReport:
        """Extract CCCD fields and report which strategies found them.

        Args:
            source: Encoded image bytes or a ``uint8`` pixel array.

        Returns:
            Extraction report including the recognized text.

        Raises:
            RecognitionFailed: If text recognition failed.
        """
        outcome = self.enhancer.try_enhance(source)
        if outcome.degraded is not None:
            logger.warning("Continuing with original image: %s", outcome.degraded)
        # Lossless, so the enhanced pixels reach the recognizer unchanged.
        image = encode_png(outcome.image) if outcome.ok else source

        try:
            async with recognizer_session(self.recognizer_factory) as recognizer:
                text = await self._recognize(recognizer, image, source, outcome.ok)
        except RecognitionFailed:
            raise
        except Exception as exc:
            logger.error("Recognizer session could not be started: %s", exc)
            raise RecognitionFailed(f"Recognizer unavailable: {exc}", exc) from exc

        return self.extractor.extract_report(text)

    async def _recognize(
        self,
        recognizer: TextRecognizer,
        image: np.ndarray | bytes,
        original: np.ndarray | bytes,
        enhanced: bool,
    ) -> str:
        """Recognize the image, retrying once with the original on failure."""
        try:
            return await recognizer.recognize(image)
        except Exception as exc:
            if not enhanced:
                logger.error("Recognition failed: %s", exc)
                raise RecognitionFailed(f"Text recognition failed: {exc}", exc) from exc
            logger.warning(
                "Recognition with enhanced image failed, trying original: %s", exc
            )

        try:
            return await recognizer.recognize(original)
        except Exception as exc:
            logger.error("Recognition with original image failed: %s", exc)
            raise RecognitionFailed(f"Text recognition failed: {exc}", exc) from exc


async def extract_cccd_info(
    source: np.ndarray | bytes, config: AppConfig | None = None
) -> CCCDInfo:
    """Extract CCCD fields from a card photo with a default pipeline.

    Args:
        source: Encoded image bytes or a ``uint8`` pixel array.
        config: Application configuration; defaults when omitted.

    Returns:
        The extracted fields.

    Raises:
        RecognitionFailed: If text recognition failed.
    """
    return await CCCDProcessor(config).process(source)
