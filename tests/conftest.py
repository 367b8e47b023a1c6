"""Shared pytest fixtures for the document processor test suite."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import fitz
import pytest
from PIL import Image

from docprocessor.config.settings import Settings
from docprocessor.interfaces.ocr_provider import IOCRProvider
from docprocessor.models.document import (
    Document,
    DocumentMetadata,
    KeyValuePair,
    ProcessingMethod,
    TextSource,
)
from docprocessor.utils.errors import ProcessingStep

SAMPLE_TEXT = "Name: John Doe\nEmail: john@example.com"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeOCRProvider(IOCRProvider):
    """Scriptable OCR provider: fixed text, a raised error, or unavailable."""

    def __init__(
        self,
        name: str = "tesseract",
        text: str = "",
        available: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.text = text
        self.available = available
        self.error = error
        self.calls: list[Path] = []

    async def extract_text(self, image_path: Path) -> str:
        self.calls.append(Path(image_path))
        if self.error is not None:
            raise self.error
        return self.text

    def get_provider_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        return self.available

    def get_processing_step(self) -> ProcessingStep:
        if self.name == "google-vision":
            return ProcessingStep.CLOUD_OCR
        return ProcessingStep.LOCAL_OCR


# ---------------------------------------------------------------------------
# File builders
# ---------------------------------------------------------------------------


def build_pdf_bytes(pages: list[str]) -> bytes:
    """Build a PDF with one page per entry; an empty entry yields a blank page."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


def build_png_bytes(width: int = 120, height: int = 80) -> bytes:
    img = Image.new("RGB", (width, height), (255, 255, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing every store at a temp directory, with no credentials."""
    return Settings(
        _env_file=None,
        ai_provider="mock",
        anthropic_api_key="",
        openai_api_key="",
        openai_base_url="",
        google_application_credentials="",
        pdf_ocr_enabled=False,
        database_path=str(tmp_path / "test_documents.db"),
        upload_dir=str(tmp_path / "uploads"),
        app_env="test",
    )


@pytest.fixture
def text_pdf_bytes() -> bytes:
    return build_pdf_bytes([SAMPLE_TEXT])


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    return build_pdf_bytes([""])


@pytest.fixture
def png_bytes() -> bytes:
    return build_png_bytes()


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory for stored-document models with sensible defaults."""

    def _make(
        original_filename: str = "invoice.pdf",
        pairs: list[tuple[str, object]] | None = None,
        extracted_text: str = SAMPLE_TEXT,
        created_at: datetime | None = None,
        file_size: int = 1024,
    ) -> Document:
        pairs = pairs if pairs is not None else [("Name", "John Doe"), ("Email", "john@example.com")]
        moment = created_at or datetime.now(tz=timezone.utc)  # noqa: UP017
        return Document(
            filename=f"document-1700000000000-000000001{Path(original_filename).suffix}",
            original_filename=original_filename,
            key_value_pairs=[KeyValuePair(key=k, value=v) for k, v in pairs],
            confidence=0.85,
            extracted_text=extracted_text,
            processing_method=ProcessingMethod.MOCK,
            metadata=DocumentMetadata(
                file_size=file_size,
                mime_type="application/pdf",
                processing_time_ms=12,
                extracted_at=moment,
                text_source=TextSource.PDF_TEXT,
            ),
            created_at=moment,
        )

    return _make
