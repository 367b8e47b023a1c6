"""Custom exception hierarchy for the document processor.

All application exceptions inherit from :class:`DocumentProcessorError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "anthropic", "tesseract", "google-vision") caused the
failure.

The hierarchy is organized by pipeline stage:

    DocumentProcessorError  (base -- catch-all for any processor error)
    +-- ExtractionError              (text extraction, tagged with a ProcessingStep)
    |   +-- UnsupportedTypeError     (MIME type outside the accepted set)
    |   +-- InvalidFormatError       (bytes do not match the declared type)
    |   +-- ScannedPdfUnsupportedError (image-only PDF, no conversion path)
    |   +-- CompleteFailureError     (every fallback tier exhausted)
    +-- ProviderUnavailableError     (backend not configured / unreachable)
    +-- LLMError                     (any LLM API call failure)
    +-- MalformedModelOutputError    (model answer without a parseable result)
    +-- ConfigurationError           (startup / missing config)
    +-- StorageError                 (document store / index failures)
    +-- DocumentNotFoundError        (lookup by id found nothing)
    +-- NoTextContentError           (upload yielded no text to extract from)

Extraction errors carry a ``processing_step`` all the way to the HTTP boundary
so the caller can pick user-facing remediation text.
"""

from __future__ import annotations

from enum import Enum


class ProcessingStep(str, Enum):
    """Stage of the document pipeline that produced an error."""

    FILE_TYPE_CHECK = "file-type-check"
    PDF_PARSE = "pdf-parse"
    PDF_OCR_FALLBACK = "pdf-ocr-fallback"
    IMAGE_PREPROCESS = "image-preprocess"
    CLOUD_OCR = "cloud-ocr"
    LOCAL_OCR = "local-ocr"
    COMPLETE_FAILURE = "complete-failure"
    KEY_VALUE_EXTRACTION = "key-value-extraction"
    PERSISTENCE = "persistence"
    UNKNOWN = "unknown"


class ExtractionErrorKind(str, Enum):
    """Error taxonomy surfaced to callers of the extraction pipeline."""

    UNSUPPORTED_TYPE = "UnsupportedType"
    INVALID_FORMAT = "InvalidFormat"
    SCANNED_PDF_UNSUPPORTED = "ScannedPdfUnsupported"
    PROVIDER_UNAVAILABLE = "ProviderUnavailable"
    MALFORMED_MODEL_OUTPUT = "MalformedModelOutput"
    COMPLETE_FAILURE = "CompleteFailure"
    PROCESSING_FAILED = "ProcessingFailed"


class DocumentProcessorError(Exception):
    """Base exception for all document processor errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[anthropic] Rate limit exceeded``.

    ``kind`` places the error in the caller-facing taxonomy; it is ``None``
    for errors outside it.
    """

    default_kind: ExtractionErrorKind | None = None

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def kind(self) -> ExtractionErrorKind | None:
        return self.default_kind

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Text extraction errors
# ---------------------------------------------------------------------------

class ExtractionError(DocumentProcessorError):
    """Raised when turning an uploaded file into text fails.

    ``processing_step`` names the stage that broke and ``kind`` places the
    failure in the caller-facing taxonomy.
    """

    default_kind = ExtractionErrorKind.PROCESSING_FAILED

    def __init__(
        self,
        message: str = "Text extraction failed",
        processing_step: ProcessingStep = ProcessingStep.UNKNOWN,
        provider_name: str | None = None,
        kind: ExtractionErrorKind | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._processing_step = processing_step
        self._kind = kind or self.default_kind

    @property
    def processing_step(self) -> ProcessingStep:
        return self._processing_step

    @property
    def kind(self) -> ExtractionErrorKind:
        return self._kind


class UnsupportedTypeError(ExtractionError):
    """Raised when the declared MIME type is outside the accepted set."""

    default_kind = ExtractionErrorKind.UNSUPPORTED_TYPE

    def __init__(self, message: str = "Unsupported file type") -> None:
        super().__init__(message=message, processing_step=ProcessingStep.FILE_TYPE_CHECK)


class InvalidFormatError(ExtractionError):
    """Raised when file content does not match its declared type."""

    default_kind = ExtractionErrorKind.INVALID_FORMAT

    def __init__(
        self,
        message: str = "File content does not match its declared type",
        processing_step: ProcessingStep = ProcessingStep.PDF_PARSE,
    ) -> None:
        super().__init__(message=message, processing_step=processing_step)


class ScannedPdfUnsupportedError(ExtractionError):
    """Raised for image-only PDFs when no PDF-to-image path is enabled.

    The message is remediation text meant to be shown to the user as-is.
    """

    default_kind = ExtractionErrorKind.SCANNED_PDF_UNSUPPORTED

    def __init__(self, message: str) -> None:
        super().__init__(message=message, processing_step=ProcessingStep.PDF_OCR_FALLBACK)


class CompleteFailureError(ExtractionError):
    """Raised when every fallback tier failed; the message embeds each tier's error."""

    default_kind = ExtractionErrorKind.COMPLETE_FAILURE

    def __init__(self, message: str, tier_errors: list[str] | None = None) -> None:
        super().__init__(message=message, processing_step=ProcessingStep.COMPLETE_FAILURE)
        self._tier_errors = list(tier_errors or [])

    @property
    def tier_errors(self) -> list[str]:
        return list(self._tier_errors)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(DocumentProcessorError):
    """Raised when an OCR or LLM backend is not configured or unreachable.

    The OCR fallback chain catches this to move on to the next provider.
    """

    default_kind = ExtractionErrorKind.PROVIDER_UNAVAILABLE

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(DocumentProcessorError):
    """Raised when an LLM API call fails."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedModelOutputError(LLMError):
    """Raised when a model answer holds no parseable key-value array."""

    default_kind = ExtractionErrorKind.MALFORMED_MODEL_OUTPUT

    _SNIPPET_LIMIT = 500

    def __init__(
        self,
        message: str = "Model output did not contain a parseable JSON array",
        provider_name: str | None = None,
        raw_output: str = "",
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._raw_snippet = raw_output[: self._SNIPPET_LIMIT]

    @property
    def raw_snippet(self) -> str:
        return self._raw_snippet


# ---------------------------------------------------------------------------
# Configuration / persistence errors
# ---------------------------------------------------------------------------

class ConfigurationError(DocumentProcessorError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageError(DocumentProcessorError):
    """Raised when a store rejects an operation."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentNotFoundError(DocumentProcessorError):
    """Raised when a document id does not resolve to a stored document."""

    def __init__(self, document_id: str) -> None:
        super().__init__(message=f"Document not found: {document_id}")
        self._document_id = document_id

    @property
    def document_id(self) -> str:
        return self._document_id


class NoTextContentError(DocumentProcessorError):
    """Raised when an upload produced no text at all (empty file or blank OCR)."""

    def __init__(self, message: str = "No text content found in the document") -> None:
        super().__init__(message=message)
