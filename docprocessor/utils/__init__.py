"""Utility modules for the document processor.

- **errors** -- Exception hierarchy rooted at DocumentProcessorError; text
  extraction errors carry a ProcessingStep tag for caller-side remediation.
- **image_preprocessor** -- Deterministic grayscale / normalize / sharpen /
  resize chain applied before local OCR, with scoped temp-file cleanup.
- **logging** -- structlog setup: coloured console output in development,
  structured JSON in production.
- **text_normalizer** -- Key normalization for the index and the
  "is this PDF text meaningful" heuristic.
"""

from docprocessor.utils.errors import (
    CompleteFailureError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentProcessorError,
    ExtractionError,
    ExtractionErrorKind,
    InvalidFormatError,
    LLMError,
    MalformedModelOutputError,
    NoTextContentError,
    ProcessingStep,
    ProviderUnavailableError,
    ScannedPdfUnsupportedError,
    StorageError,
    UnsupportedTypeError,
)
from docprocessor.utils.image_preprocessor import ImagePreprocessor
from docprocessor.utils.logging import configure_logging, get_logger
from docprocessor.utils.text_normalizer import is_meaningful_text, normalize_key

__all__ = [
    "CompleteFailureError",
    "ConfigurationError",
    "DocumentNotFoundError",
    "DocumentProcessorError",
    "ExtractionError",
    "ExtractionErrorKind",
    "ImagePreprocessor",
    "InvalidFormatError",
    "LLMError",
    "MalformedModelOutputError",
    "NoTextContentError",
    "ProcessingStep",
    "ProviderUnavailableError",
    "ScannedPdfUnsupportedError",
    "StorageError",
    "UnsupportedTypeError",
    "configure_logging",
    "get_logger",
    "is_meaningful_text",
    "normalize_key",
]
