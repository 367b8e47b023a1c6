"""Tesseract OCR provider for document images.

Wraps pytesseract.  Every image first goes through
:class:`~docprocessor.utils.image_preprocessor.ImagePreprocessor`, which
writes a grayscale, contrast-normalized, sharpened and resized PNG next to
the original; the derived file is removed on every exit path.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import pytesseract

from docprocessor.interfaces.ocr_provider import IOCRProvider
from docprocessor.utils.errors import ExtractionError, ProcessingStep
from docprocessor.utils.image_preprocessor import ImagePreprocessor
from docprocessor.utils.logging import get_logger

# LSTM engine only (--oem 1), fully automatic page segmentation (--psm 3).
_TESSERACT_CONFIG = "--oem 1 --psm 3 -c preserve_interword_spaces=1"


class TesseractOCRProvider(IOCRProvider):
    """Local OCR backed by Google Tesseract via pytesseract.

    Parameters
    ----------
    preprocessor:
        Shared image preprocessor.
    language:
        Tesseract language pack; fixed for the process lifetime.
    """

    def __init__(self, preprocessor: ImagePreprocessor, language: str = "eng") -> None:
        self._preprocessor = preprocessor
        self._language = language
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IOCRProvider interface
    # ------------------------------------------------------------------

    async def extract_text(self, image_path: Path) -> str:
        start = time.perf_counter()
        try:
            with self._preprocessor.preprocessed_copy(image_path) as processed_path:
                text = await asyncio.to_thread(self._recognize, processed_path)
        except ExtractionError:
            raise
        except (OSError, ValueError) as exc:
            # PIL raises OSError / ValueError for unreadable or truncated images.
            raise ExtractionError(
                f"Image preprocessing failed: {exc}",
                processing_step=ProcessingStep.IMAGE_PREPROCESS,
                provider_name=self.get_provider_name(),
            ) from exc

        elapsed = time.perf_counter() - start
        self._logger.info(
            "ocr_extraction_complete",
            provider="tesseract",
            characters=len(text),
            processing_time=round(elapsed, 3),
        )
        return text

    def get_provider_name(self) -> str:
        return "tesseract"

    def is_available(self) -> bool:
        """Check that the Tesseract binary can be found."""
        try:
            pytesseract.get_tesseract_version()
            return True
        except pytesseract.TesseractNotFoundError:
            return False

    def get_processing_step(self) -> ProcessingStep:
        return ProcessingStep.LOCAL_OCR

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _recognize(self, image_path: Path) -> str:
        """Run Tesseract synchronously (called via ``asyncio.to_thread``)."""
        try:
            text = pytesseract.image_to_string(
                str(image_path), lang=self._language, config=_TESSERACT_CONFIG
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, RuntimeError) as exc:
            self._logger.error("ocr_extraction_failed", provider="tesseract", error=str(exc))
            raise ExtractionError(
                f"Tesseract OCR failed: {exc}",
                processing_step=ProcessingStep.LOCAL_OCR,
                provider_name=self.get_provider_name(),
            ) from exc
        return text.strip()
