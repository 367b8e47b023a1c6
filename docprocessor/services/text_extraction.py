"""Text extraction pipeline: uploaded file → plain text.

Routing by declared MIME type:

    application/pdf
        1. ``%PDF`` magic header check (fail fast with InvalidFormat)
        2. PyMuPDF text layer
        3. Quality heuristic (length > 20 and alnum ratio > 0.3)
        4. On heuristic miss or parse failure: PDF OCR path
           - enabled  → render each page at 200 dpi, OCR through the image chain
           - disabled → ScannedPdfUnsupportedError with remediation text

    image/jpeg, image/jpg, image/png
        OCR fallback chain (cloud OCR → Tesseract with preprocessing)

Every failure is an :class:`ExtractionError` tagged with the
:class:`ProcessingStep` that broke, except an image or scan that OCR read
cleanly and found blank, which is :class:`NoTextContentError`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import fitz  # PyMuPDF

from docprocessor.models.document import ExtractedText, MediaType, TextSource
from docprocessor.services.ocr_service import OCRService
from docprocessor.utils.errors import (
    CompleteFailureError,
    ExtractionError,
    InvalidFormatError,
    NoTextContentError,
    ProcessingStep,
    ScannedPdfUnsupportedError,
    UnsupportedTypeError,
)
from docprocessor.utils.logging import get_logger
from docprocessor.utils.text_normalizer import (
    MIN_ALNUM_RATIO,
    MIN_TEXT_LENGTH,
    is_meaningful_text,
)

_PDF_MAGIC = b"%PDF"
_DEFAULT_RENDER_DPI = 200

SCANNED_PDF_MESSAGE = "\n".join(
    [
        "This PDF appears to contain scanned images or forms that require OCR processing.",
        "",
        "Options:",
        "1. Convert the PDF to JPG/PNG format and upload the image instead",
        "2. Use a PDF with selectable text content",
        "3. Enable automatic PDF OCR by setting PDF_OCR_ENABLED=true",
        "",
        "Then restart the server to enable PDF page rendering.",
    ]
)


class TextExtractionPipeline:
    """Turns a stored upload into :class:`ExtractedText`.

    Parameters
    ----------
    ocr_service:
        Image OCR fallback chain, shared by the image path and the PDF OCR
        path.
    pdf_ocr_enabled:
        Whether scanned PDFs may be rasterized and OCR'd.
    render_dpi:
        Resolution used when rasterizing PDF pages.
    min_text_length, min_alnum_ratio:
        Thresholds of the native-text quality heuristic.
    """

    def __init__(
        self,
        ocr_service: OCRService,
        pdf_ocr_enabled: bool = False,
        render_dpi: int = _DEFAULT_RENDER_DPI,
        min_text_length: int = MIN_TEXT_LENGTH,
        min_alnum_ratio: float = MIN_ALNUM_RATIO,
    ) -> None:
        self._ocr_service = ocr_service
        self._pdf_ocr_enabled = pdf_ocr_enabled
        self._render_dpi = render_dpi
        self._min_text_length = min_text_length
        self._min_alnum_ratio = min_alnum_ratio
        self._logger = get_logger(__name__)

    async def extract_text(self, path: Path, mime_type: str) -> ExtractedText:
        """Extract text from the file at *path* declared as *mime_type*.

        Raises
        ------
        UnsupportedTypeError
            *mime_type* is not PDF, JPEG or PNG.
        InvalidFormatError
            A declared PDF lacks the ``%PDF`` header.
        ScannedPdfUnsupportedError
            Image-only PDF while the PDF OCR path is disabled.
        NoTextContentError
            OCR ran without error and found no text.
        CompleteFailureError
            Every applicable tier failed.
        """
        media_type = MediaType.parse(mime_type)
        if media_type is None:
            raise UnsupportedTypeError(f"Unsupported file type: {mime_type}")

        path = Path(path)
        self._logger.info("text_extraction_started", path=path.name, mime_type=media_type.value)

        if media_type is MediaType.PDF:
            return await self._extract_from_pdf(path)
        return await self._ocr_service.extract_text(path)

    # ------------------------------------------------------------------
    # PDF path
    # ------------------------------------------------------------------

    async def _extract_from_pdf(self, path: Path) -> ExtractedText:
        header = await asyncio.to_thread(_read_header, path)
        if header != _PDF_MAGIC:
            raise InvalidFormatError("File does not appear to be a valid PDF")

        try:
            text, page_count = await asyncio.to_thread(_read_text_layer, path)
        except Exception as parse_exc:
            self._logger.warning("pdf_parse_failed", path=path.name, error=str(parse_exc))
            try:
                return await self._extract_from_scanned_pdf(path)
            except ScannedPdfUnsupportedError:
                raise
            except ExtractionError as ocr_exc:
                raise CompleteFailureError(
                    f"PDF processing failed: {parse_exc}. {ocr_exc.message}",
                    tier_errors=[f"pdf-parse: {parse_exc}", f"pdf-ocr: {ocr_exc.message}"],
                ) from ocr_exc

        self._logger.info("pdf_parsed", pages=page_count, characters=len(text))
        if is_meaningful_text(text, self._min_alnum_ratio, self._min_text_length):
            return ExtractedText(text=text.strip(), source=TextSource.PDF_TEXT, page_count=page_count)

        self._logger.info("pdf_text_not_meaningful", path=path.name, characters=len(text.strip()))
        return await self._extract_from_scanned_pdf(path)

    async def _extract_from_scanned_pdf(self, path: Path) -> ExtractedText:
        if not self._pdf_ocr_enabled:
            raise ScannedPdfUnsupportedError(SCANNED_PDF_MESSAGE)

        try:
            page_count = await asyncio.to_thread(_page_count, path)
        except Exception as exc:
            raise ExtractionError(
                f"Could not open PDF for page rendering: {exc}",
                processing_step=ProcessingStep.PDF_OCR_FALLBACK,
            ) from exc

        page_texts: list[str] = []
        page_errors: list[str] = []
        for page_number in range(page_count):
            image_path = path.with_name(f"{path.stem}-page-{page_number + 1}.png")
            try:
                await asyncio.to_thread(_render_page, path, page_number, image_path, self._render_dpi)
                extracted = await self._ocr_service.extract_text(image_path)
                page_texts.append(extracted.text)
            except NoTextContentError:
                self._logger.info("pdf_page_blank", page=page_number + 1)
            except CompleteFailureError as exc:
                page_errors.append(f"page {page_number + 1}: {exc.message}")
            except Exception as exc:
                raise ExtractionError(
                    f"PDF page rendering failed: {exc}",
                    processing_step=ProcessingStep.PDF_OCR_FALLBACK,
                ) from exc
            finally:
                image_path.unlink(missing_ok=True)

        if not page_texts and not page_errors:
            raise NoTextContentError()
        if not page_texts:
            raise CompleteFailureError(
                "PDF OCR found no text on any page. " + "; ".join(page_errors),
                tier_errors=page_errors,
            )

        self._logger.info(
            "pdf_ocr_complete",
            pages=page_count,
            pages_with_text=len(page_texts),
        )
        return ExtractedText(
            text="\n\n".join(page_texts),
            source=TextSource.PDF_OCR,
            page_count=page_count,
        )


# ----------------------------------------------------------------------
# Synchronous PyMuPDF helpers (run via asyncio.to_thread)
# ----------------------------------------------------------------------


def _read_header(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read(len(_PDF_MAGIC))


def _read_text_layer(path: Path) -> tuple[str, int]:
    with fitz.open(path) as doc:
        return "".join(page.get_text() for page in doc), doc.page_count


def _page_count(path: Path) -> int:
    with fitz.open(path) as doc:
        return doc.page_count


def _render_page(path: Path, page_number: int, image_path: Path, dpi: int) -> None:
    with fitz.open(path) as doc:
        pixmap = doc.load_page(page_number).get_pixmap(dpi=dpi, alpha=False)
        pixmap.save(str(image_path))
