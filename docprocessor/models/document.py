"""Document and text extraction models.

Defines Pydantic v2 models for the earliest stages of the pipeline and for
the canonical persisted document:

    1. A user uploads a file              → UploadedFile
    2. The extraction pipeline reads it   → ExtractedText
    3. The key-value backend parses text  → list[KeyValuePair]
    4. The document store persists it     → Document

All models are frozen; a new state is produced with ``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------
class ProcessingMethod(str, Enum):  # noqa: UP042
    """Backend that ultimately produced a document's text or key-value pairs."""

    GOOGLE_VISION = "google-vision"   # cloud OCR engine
    TESSERACT = "tesseract"           # local OCR engine
    ANTHROPIC = "anthropic"           # cloud LLM A
    OPENAI = "openai"                 # cloud LLM B
    MOCK = "mock"                     # deterministic regex extractor


class TextSource(str, Enum):  # noqa: UP042
    """Where the extracted text of a document came from."""

    PDF_TEXT = "pdf-text"
    PDF_OCR = "pdf-ocr"
    GOOGLE_VISION = "google-vision"
    TESSERACT = "tesseract"


class MediaType(str, Enum):  # noqa: UP042
    """MIME types the extraction pipeline accepts."""

    PDF = "application/pdf"
    JPEG = "image/jpeg"
    JPG = "image/jpg"
    PNG = "image/png"

    @property
    def is_image(self) -> bool:
        return self is not MediaType.PDF

    @classmethod
    def parse(cls, mime_type: str) -> MediaType | None:
        """Return the matching member, or ``None`` for unsupported types."""
        try:
            return cls((mime_type or "").strip().lower())
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# KeyValuePair: one extracted field.  Keys need not be unique.
# ---------------------------------------------------------------------------
class KeyValuePair(BaseModel):
    """A single ``{key, value}`` field extracted from a document.

    ``value`` keeps whatever JSON type the backend produced (string, number,
    boolean, list, object); empty values are allowed here for display but
    never reach the key-value index.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    value: Any = None


# ---------------------------------------------------------------------------
# ExtractedText: output of the text extraction pipeline.
# ---------------------------------------------------------------------------
class ExtractedText(BaseModel):
    """Plain text produced from an uploaded file, tagged with its source."""

    model_config = ConfigDict(frozen=True)

    text: str
    source: TextSource
    page_count: int | None = None


# ---------------------------------------------------------------------------
# UploadedFile: what the HTTP layer (or CLI) hands to the document service.
# ---------------------------------------------------------------------------
class UploadedFile(BaseModel):
    """Raw upload received from a client; bytes are held outside serialization."""

    model_config = ConfigDict(frozen=True)

    original_filename: str
    mime_type: str
    content: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)


# ---------------------------------------------------------------------------
# Document: the canonical persisted record.
# ---------------------------------------------------------------------------
class DocumentMetadata(BaseModel):
    """File and processing facts recorded alongside a document."""

    model_config = ConfigDict(frozen=True)

    file_size: int = 0
    mime_type: str = ""
    processing_time_ms: int = 0
    extracted_at: datetime = Field(default_factory=_utcnow)
    text_source: TextSource | None = None


class Document(BaseModel):
    """A processed upload.

    Created once per successful upload and immutable afterwards; the only
    lifecycle transition is deletion, which cascades to its index entries.
    ``id`` is ``None`` until the document store assigns one.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    filename: str
    original_filename: str
    # Insertion order == extraction order; duplicate keys are preserved.
    key_value_pairs: list[KeyValuePair] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    extracted_text: str = ""
    processing_method: ProcessingMethod = ProcessingMethod.MOCK
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    created_at: datetime = Field(default_factory=_utcnow)


class DocumentSummary(BaseModel):
    """Reduced projection of a document used by listings and filename search."""

    model_config = ConfigDict(frozen=True)

    id: str
    original_filename: str
    key_value_pairs: list[KeyValuePair] = Field(default_factory=list)
    confidence: float = 0.0
    processing_method: ProcessingMethod = ProcessingMethod.MOCK
    created_at: datetime
    file_size: int = 0

    @classmethod
    def from_document(cls, document: Document) -> DocumentSummary:
        return cls(
            id=document.id or "",
            original_filename=document.original_filename,
            key_value_pairs=document.key_value_pairs,
            confidence=document.confidence,
            processing_method=document.processing_method,
            created_at=document.created_at,
            file_size=document.metadata.file_size,
        )


class ProcessingResult(BaseModel):
    """What ``process`` returns to its caller after a successful upload."""

    model_config = ConfigDict(frozen=True)

    id: str
    key_value_pairs: list[KeyValuePair]
    confidence: float
    original_filename: str
    processing_time_ms: int
    indexed_entries: int = 0


class DocumentStats(BaseModel):
    """Document counts used by diagnostics endpoints."""

    model_config = ConfigDict(frozen=True)

    total_documents: int = 0
    recent_documents: int = 0
