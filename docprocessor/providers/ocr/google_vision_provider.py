"""Google Cloud Vision OCR provider.

High-accuracy cloud OCR and the first tier of the image OCR chain.  The
provider is only usable when a service-account credentials file is
configured; otherwise :meth:`is_available` reports ``False`` and the OCR
service routes straight to Tesseract.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

from google.api_core import exceptions as google_exceptions
from google.cloud import vision

from docprocessor.config.settings import Settings
from docprocessor.interfaces.ocr_provider import IOCRProvider
from docprocessor.utils.errors import ExtractionError, ProcessingStep, ProviderUnavailableError
from docprocessor.utils.logging import get_logger


class GoogleVisionOCRProvider(IOCRProvider):
    """OCR provider backed by the Cloud Vision ``text_detection`` feature.

    The client is created lazily on first use so that constructing the
    provider never touches the network or the credentials file.
    """

    def __init__(self, settings: Settings) -> None:
        self._credentials_path = settings.google_application_credentials
        self._project_id = settings.google_cloud_project_id
        self._client: vision.ImageAnnotatorClient | None = None
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IOCRProvider interface
    # ------------------------------------------------------------------

    async def extract_text(self, image_path: Path) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(
                "Google Cloud Vision credentials not configured",
                provider_name=self.get_provider_name(),
            )
        start = time.perf_counter()
        text = await asyncio.to_thread(self._detect_text, Path(image_path))
        self._logger.info(
            "ocr_extraction_complete",
            provider="google-vision",
            characters=len(text),
            processing_time=round(time.perf_counter() - start, 3),
        )
        return text

    def get_provider_name(self) -> str:
        return "google-vision"

    def is_available(self) -> bool:
        """Return ``True`` if a credentials file is configured and exists."""
        return bool(self._credentials_path) and Path(self._credentials_path).is_file()

    def get_processing_step(self) -> ProcessingStep:
        return ProcessingStep.CLOUD_OCR

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_client(self) -> vision.ImageAnnotatorClient:
        if self._client is None:
            self._client = vision.ImageAnnotatorClient.from_service_account_file(
                self._credentials_path
            )
        return self._client

    def _detect_text(self, image_path: Path) -> str:
        """Run text detection synchronously (called via ``asyncio.to_thread``).

        The first annotation holds the full-page text; the remaining ones are
        individual words and are ignored.
        """
        try:
            content = image_path.read_bytes()
            response = self._get_client().text_detection(image=vision.Image(content=content))
        except (google_exceptions.GoogleAPIError, OSError, ValueError) as exc:
            self._logger.error("ocr_extraction_failed", provider="google-vision", error=str(exc))
            raise ExtractionError(
                f"Google Vision API error: {exc}",
                processing_step=ProcessingStep.CLOUD_OCR,
                provider_name=self.get_provider_name(),
            ) from exc

        if response.error.message:
            raise ExtractionError(
                f"Google Vision API error: {response.error.message}",
                processing_step=ProcessingStep.CLOUD_OCR,
                provider_name=self.get_provider_name(),
            )

        annotations = response.text_annotations
        if not annotations:
            return ""
        return annotations[0].description.strip()
