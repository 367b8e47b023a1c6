"""Abstract base class for the denormalized key-value index store.

The store is deliberately dumb: it inserts, deletes and filters rows.
Normalization, grouping and frequency aggregation happen in
:class:`~docprocessor.services.indexing_engine.IndexingEngine`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docprocessor.models.index import IndexEntry, KeyStatistic


# Concrete implementation: SQLiteKeyValueIndexStore (docprocessor/providers/storage/)
class IKeyValueIndexStore(ABC):
    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices.  Must be awaited once before use."""

    @abstractmethod
    async def insert_many(self, entries: list[IndexEntry]) -> int:
        """Insert all *entries* in one batch and return how many were written."""

    @abstractmethod
    async def delete_by_document(self, document_id: str) -> int:
        """Delete every entry of a document and return the deleted count."""

    @abstractmethod
    async def find_by_key(self, key: str, limit: int) -> list[IndexEntry]:
        """Entries whose raw key equals *key*, newest first."""

    @abstractmethod
    async def find_by_normalized_fragment(self, fragment: str, limit: int) -> list[IndexEntry]:
        """Entries whose normalized key contains *fragment*, newest first."""

    @abstractmethod
    async def find_by_key_term(self, term: str, normalized_term: str, limit: int) -> list[IndexEntry]:
        """Entries whose raw key contains *term* or normalized key contains
        *normalized_term* (both case-insensitive), newest first."""

    @abstractmethod
    async def find_by_value_fragment(self, term: str, limit: int) -> list[IndexEntry]:
        """String-valued entries containing *term* (case-insensitive), newest first."""

    @abstractmethod
    async def key_statistics(self, limit: int) -> list[KeyStatistic]:
        """Usage statistics grouped by raw key, most frequent first."""
