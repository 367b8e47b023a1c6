"""Abstract base class for key-value extraction backends.

A key-value extractor turns document text into an ordered list of
``{key, value}`` pairs and answers chat questions over stored documents.
Exactly one extractor is selected at startup; the rest of the system only
ever sees this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docprocessor.models.chat import DocumentContext
from docprocessor.models.document import KeyValuePair, ProcessingMethod


# Concrete implementations: LLMKeyValueExtractor (Anthropic / OpenAI),
# MockKeyValueExtractor.  Located in: docprocessor/providers/extraction/
class IKeyValueExtractor(ABC):
    """Capability set shared by the real and the deterministic backends."""

    @abstractmethod
    async def extract_pairs(self, text: str) -> list[KeyValuePair]:
        """Return the key-value pairs found in *text*, in extraction order.

        Raises
        ------
        docprocessor.utils.errors.MalformedModelOutputError
            If a model backend answered without a parseable JSON array.
        docprocessor.utils.errors.LLMError
            If the backend call itself failed.
        """

    @abstractmethod
    async def chat_answer(self, query: str, documents: list[DocumentContext]) -> str:
        """Answer *query* from the supplied document summaries."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the backend name, e.g. ``"anthropic"`` or ``"mock"``."""

    @abstractmethod
    def get_processing_method(self) -> ProcessingMethod:
        """Return the tag recorded on documents this backend processed."""
