"""OCR provider implementations for document images.

Two implementations of IOCRProvider, tried in order by ocr_service.py:
    1. GoogleVisionOCRProvider: cloud OCR; used when a service-account
       credentials file is configured.
    2. TesseractOCRProvider: local OCR with deterministic preprocessing.
       Always attempted when the cloud tier is unavailable, fails, or
       returns no text.
"""

from docprocessor.providers.ocr.google_vision_provider import GoogleVisionOCRProvider
from docprocessor.providers.ocr.tesseract_provider import TesseractOCRProvider

__all__ = ["GoogleVisionOCRProvider", "TesseractOCRProvider"]
