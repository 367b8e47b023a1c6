"""Abstract base class for OCR service providers.

Defines the contract for any OCR engine used to read text out of document
images.  Implementations wrap Google Cloud Vision or Tesseract; swapping or
adding a provider requires only a new concrete class, no call-site changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from docprocessor.utils.errors import ProcessingStep


# Concrete implementations: GoogleVisionOCRProvider, TesseractOCRProvider
# Located in: docprocessor/providers/ocr/
# The OCR service (docprocessor/services/ocr_service.py) tries providers in the
# order given by the composition root and returns the first non-empty text.
class IOCRProvider(ABC):
    """Contract for OCR services that extract text from document images.

    Every concrete provider must be able to:
    * Accept an image path and return the recognised plain text.
    * Report its availability (credentials present, binary installed).
    * Name the pipeline stage it represents, so failures can be tagged.
    """

    @abstractmethod
    async def extract_text(self, image_path: Path) -> str:
        """Run OCR on the image at *image_path* and return its text.

        An empty string means the engine ran but found no text; the OCR
        service treats that as a miss and tries the next provider.

        Raises
        ------
        docprocessor.utils.errors.ExtractionError
            If the OCR engine fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"tesseract"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable.

        Implementations check for credentials or binaries without running a
        full OCR pass.
        """

    @abstractmethod
    def get_processing_step(self) -> ProcessingStep:
        """Return the pipeline stage this provider represents."""
