"""Single entry point to the key-value extraction backend.

The backend is chosen once at startup (see
:func:`~docprocessor.providers.extraction.build_key_value_extractor`) and
injected here.  There is no fallback between backends at call time: a
failing call is logged and re-raised unchanged, so the caller sees the
real problem and the provider that caused it.
"""

from __future__ import annotations

import time

from docprocessor.interfaces.key_value_extractor import IKeyValueExtractor
from docprocessor.models.chat import DocumentContext
from docprocessor.models.document import KeyValuePair, ProcessingMethod
from docprocessor.utils.errors import MalformedModelOutputError
from docprocessor.utils.logging import get_logger


class KeyValueExtractionGateway:
    """Logs and times every call into the selected extractor."""

    def __init__(self, extractor: IKeyValueExtractor) -> None:
        self._extractor = extractor
        self._logger = get_logger(__name__)

    @property
    def provider_name(self) -> str:
        return self._extractor.get_provider_name()

    @property
    def processing_method(self) -> ProcessingMethod:
        return self._extractor.get_processing_method()

    async def extract(self, text: str) -> list[KeyValuePair]:
        """Return the key-value pairs of *text*; backend errors propagate."""
        start = time.perf_counter()
        self._logger.info(
            "kv_extraction_started",
            provider=self.provider_name,
            preview=text[:100],
        )
        try:
            pairs = await self._extractor.extract_pairs(text)
        except MalformedModelOutputError as exc:
            self._logger.error(
                "kv_extraction_failed",
                provider=self.provider_name,
                error=str(exc),
                kind=exc.kind.value,
                raw_snippet=exc.raw_snippet,
            )
            raise
        except Exception as exc:
            self._logger.error(
                "kv_extraction_failed",
                provider=self.provider_name,
                error=str(exc),
            )
            raise

        self._logger.info(
            "kv_extraction_complete",
            provider=self.provider_name,
            pair_count=len(pairs),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return pairs

    async def chat(self, query: str, documents: list[DocumentContext]) -> str:
        """Answer *query* over *documents*; backend errors propagate."""
        self._logger.info("kv_chat_started", provider=self.provider_name, query=query)
        try:
            answer = await self._extractor.chat_answer(query, documents)
        except Exception as exc:
            self._logger.error("kv_chat_failed", provider=self.provider_name, error=str(exc))
            raise
        self._logger.info("kv_chat_complete", provider=self.provider_name)
        return answer
