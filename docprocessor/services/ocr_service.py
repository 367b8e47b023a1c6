"""Image OCR with an ordered provider fallback chain.

The default order is ``google-vision`` → ``tesseract``: the cloud engine
first when it is configured, the local engine as the always-present last
resort.  Each provider is checked with ``is_available()`` and, if usable,
invoked; a provider that raises or returns blank text counts as a miss and
the chain moves on.  When every provider misses, a
:class:`CompleteFailureError` is raised whose message embeds what went wrong
at each tier, so operators can see which stage broke.  An image that every
engine read without error and found blank is not an engine failure: that
raises :class:`NoTextContentError` instead.
"""

from __future__ import annotations

from pathlib import Path

from docprocessor.interfaces.ocr_provider import IOCRProvider
from docprocessor.models.document import ExtractedText, TextSource
from docprocessor.utils.errors import CompleteFailureError, NoTextContentError
from docprocessor.utils.logging import get_logger


class OCRService:
    """Orchestrates OCR extraction across multiple providers.

    Providers are tried in the order supplied at construction time; the
    first one to return non-empty text wins.
    """

    def __init__(self, providers: list[IOCRProvider]) -> None:
        # The composition root controls the order.
        self._providers = providers
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract_text(self, image_path: Path) -> ExtractedText:
        """Run OCR on the image at *image_path* using the fallback chain.

        Raises
        ------
        NoTextContentError
            If every provider that ran returned blank text and none raised.
        CompleteFailureError
            If no provider returned text for any other reason.
        """
        tier_errors: list[str] = []
        blank_reads = 0
        failures = 0

        for provider in self._providers:
            name = provider.get_provider_name()

            if not provider.is_available():
                self._logger.warning("ocr_provider_unavailable", provider=name)
                tier_errors.append(f"{name}: not configured")
                continue

            try:
                self._logger.info("ocr_provider_attempting", provider=name)
                text = await provider.extract_text(Path(image_path))
            except Exception as exc:
                # A single provider failing is non-fatal; the next tier runs.
                self._logger.warning(
                    "ocr_provider_failed",
                    provider=name,
                    processing_step=provider.get_processing_step().value,
                    error=str(exc),
                )
                tier_errors.append(f"{name}: {exc}")
                failures += 1
                continue

            if text and text.strip():
                self._logger.info("ocr_provider_accepted", provider=name, characters=len(text))
                return ExtractedText(text=text.strip(), source=TextSource(name))

            self._logger.info("ocr_provider_empty", provider=name)
            tier_errors.append(f"{name}: no text detected")
            blank_reads += 1

        if blank_reads and not failures:
            self._logger.info("ocr_no_text_found", providers=blank_reads)
            raise NoTextContentError()

        message = "All OCR methods failed. " + "; ".join(tier_errors)
        self._logger.error("ocr_complete_failure", errors=tier_errors)
        raise CompleteFailureError(message, tier_errors=tier_errors)

    def get_available_providers(self) -> list[str]:
        """Return the names of providers that are currently available."""
        return [p.get_provider_name() for p in self._providers if p.is_available()]
