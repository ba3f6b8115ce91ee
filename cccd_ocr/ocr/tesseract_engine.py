"""Tesseract recognizer for CCCD photos.

Wraps pytesseract behind an asynchronous session: ``start()`` allocates
a dedicated worker thread, ``recognize()`` runs Tesseract on it and
``release()`` tears it down. :func:`recognizer_session` scopes one
session to one pipeline run and guarantees the release.
"""

import asyncio
import io
from collections.abc import AsyncIterator, Callable
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Protocol

import numpy as np
import pytesseract
from PIL import Image

from cccd_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class TextRecognizer(Protocol):
    """Contract of the text-recognition collaborator."""

    async def start(self) -> None: ...

    async def recognize(self, image: np.ndarray | bytes) -> str: ...

    async def release(self) -> None: ...


def _to_pil(image: np.ndarray | bytes) -> Image.Image:
    if isinstance(image, (bytes, bytearray)):
        img = Image.open(io.BytesIO(image))
        img.load()
        return img
    return Image.fromarray(image)


class TesseractRecognizer:
    """Runs Tesseract on a single dedicated worker thread.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        lang: Tesseract language code; ``vie`` reads Vietnamese diacritics.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        lang: str = "vie",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.lang = lang
        self.psm = psm
        self._executor: ThreadPoolExecutor | None = None

    @property
    def started(self) -> bool:
        return self._executor is not None

    async def start(self) -> None:
        """Allocate the worker and check the language pack is installed.

        Raises:
            RuntimeError: If the session is already started.
            LookupError: If Tesseract lacks the configured language.
            pytesseract.TesseractNotFoundError: If Tesseract is missing.
        """
        if self._executor is not None:
            raise RuntimeError("Recognizer session already started")
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="tesseract"
        )
        loop = asyncio.get_running_loop()
        languages = await loop.run_in_executor(
            self._executor, pytesseract.get_languages
        )
        if self.lang not in languages:
            raise LookupError(f"Tesseract language pack not installed: {self.lang}")
        logger.debug("Tesseract session started (lang=%s)", self.lang)

    async def recognize(self, image: np.ndarray | bytes) -> str:
        """Recognize text in an image.

        Args:
            image: Pixel array, or encoded image bytes.

        Returns:
            The recognized text with line breaks preserved.

        Raises:
            RuntimeError: If the session was not started.
            pytesseract.TesseractError: If Tesseract fails on the image.
        """
        if self._executor is None:
            raise RuntimeError("Recognizer session not started")
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(self._executor, self._recognize_sync, image)
        logger.info("Tesseract returned %d characters", len(text))
        return text

    def _recognize_sync(self, image: np.ndarray | bytes) -> str:
        return pytesseract.image_to_string(
            _to_pil(image), lang=self.lang, config=f"--psm {self.psm}"
        )

    async def release(self) -> None:
        """Shut the worker down. Safe to call if ``start()`` failed."""
        executor, self._executor = self._executor, None
        if executor is None:
            return
        await asyncio.get_running_loop().run_in_executor(
            None, lambda: executor.shutdown(wait=True)
        )
        logger.debug("Tesseract session released")


@asynccontextmanager
async def recognizer_session(
    factory: Callable[[], TextRecognizer],
) -> AsyncIterator[TextRecognizer]:
    """Create, start and always release one recognizer.

    The recognizer is released exactly once on every exit path, including
    a failed ``start()``. A failing release is logged and does not hide
    the outcome of the block.

    Args:
        factory: Builds a fresh, unstarted recognizer.

    Yields:
        The started recognizer.
    """
    recognizer = factory()
    try:
        await recognizer.start()
        yield recognizer
    finally:
        try:
            await recognizer.release()
        except Exception:
            logger.exception("Error releasing recognizer session")
