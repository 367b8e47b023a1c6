"""Abstract base class for canonical document persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from docprocessor.models.document import Document


# Concrete implementation: SQLiteDocumentStore (docprocessor/providers/storage/)
class IDocumentStore(ABC):
    """Contract for storing and retrieving processed documents."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices.  Must be awaited once before use."""

    @abstractmethod
    async def insert(self, document: Document) -> str:
        """Persist *document* and return its newly assigned id."""

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Document | None:
        """Return the document, or ``None`` if the id is unknown."""

    @abstractmethod
    async def find_recent(self, limit: int = 50) -> list[Document]:
        """Return up to *limit* documents, newest first."""

    @abstractmethod
    async def delete_by_id(self, document_id: str) -> Document | None:
        """Delete and return the document, or ``None`` if it did not exist."""

    @abstractmethod
    async def search_by_filename(self, pattern: str) -> list[Document]:
        """Case-insensitive substring match on stored or original filename."""

    @abstractmethod
    async def count(self, since: datetime | None = None) -> int:
        """Number of documents, optionally only those created after *since*."""
