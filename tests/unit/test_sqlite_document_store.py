"""Unit tests for SQLiteDocumentStore.

Each test uses a temporary SQLite database to ensure isolation.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from docprocessor.models.document import ProcessingMethod, TextSource
from docprocessor.providers.storage.sqlite_document_store import SQLiteDocumentStore
from docprocessor.utils.errors import StorageError

_BASE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)  # noqa: UP017


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> SQLiteDocumentStore:
    """Create and initialize a store with a temp DB."""
    s = SQLiteDocumentStore(db_path=tmp_path / "nested" / "documents.db")
    await s.initialize()
    return s


# ═══════════════════════════════════════════════════════════════════════
# insert / find_by_id
# ═══════════════════════════════════════════════════════════════════════


class TestInsertAndFind:
    @pytest.mark.asyncio
    async def test_insert_assigns_id(self, store, make_document) -> None:
        document_id = await store.insert(make_document())
        assert isinstance(document_id, str)
        assert len(document_id) == 32

    @pytest.mark.asyncio
    async def test_round_trip(self, store, make_document) -> None:
        original = make_document(
            pairs=[("Name", "Ada"), ("Total", 12.5), ("Tags", ["a", "b"]), ("Name", "Grace")],
            created_at=_BASE,
        )
        document_id = await store.insert(original)

        loaded = await store.find_by_id(document_id)

        assert loaded is not None
        assert loaded.id == document_id
        assert loaded.original_filename == "invoice.pdf"
        assert [(p.key, p.value) for p in loaded.key_value_pairs] == [
            ("Name", "Ada"),
            ("Total", 12.5),
            ("Tags", ["a", "b"]),
            ("Name", "Grace"),
        ]
        assert loaded.processing_method is ProcessingMethod.MOCK
        assert loaded.metadata.text_source is TextSource.PDF_TEXT
        assert loaded.metadata.file_size == 1024
        assert loaded.created_at == _BASE

    @pytest.mark.asyncio
    async def test_find_missing(self, store) -> None:
        assert await store.find_by_id("does-not-exist") is None


# ═══════════════════════════════════════════════════════════════════════
# find_recent / search_by_filename / count
# ═══════════════════════════════════════════════════════════════════════


class TestQueries:
    @pytest.mark.asyncio
    async def test_find_recent_newest_first(self, store, make_document) -> None:
        for i, name in enumerate(["a.pdf", "b.pdf", "c.pdf"]):
            await store.insert(make_document(original_filename=name, created_at=_BASE + timedelta(minutes=i)))

        recent = await store.find_recent(2)

        assert [d.original_filename for d in recent] == ["c.pdf", "b.pdf"]

    @pytest.mark.asyncio
    async def test_search_by_filename_case_insensitive(self, store, make_document) -> None:
        await store.insert(make_document(original_filename="Invoice_March.pdf"))
        await store.insert(make_document(original_filename="receipt.png"))

        matches = await store.search_by_filename("invoice_")

        assert [d.original_filename for d in matches] == ["Invoice_March.pdf"]

    @pytest.mark.asyncio
    async def test_search_underscore_is_literal(self, store, make_document) -> None:
        await store.insert(make_document(original_filename="invoiceXmarch.pdf"))
        assert await store.search_by_filename("invoice_") == []

    @pytest.mark.asyncio
    async def test_search_matches_stored_filename(self, store, make_document) -> None:
        await store.insert(make_document(original_filename="scan.pdf"))
        matches = await store.search_by_filename("document-1700000000000")
        assert len(matches) == 1

    @pytest.mark.asyncio
    async def test_count(self, store, make_document) -> None:
        await store.insert(make_document(created_at=_BASE - timedelta(days=10)))
        await store.insert(make_document(created_at=_BASE))

        assert await store.count() == 2
        assert await store.count(since=_BASE - timedelta(days=7)) == 1


# ═══════════════════════════════════════════════════════════════════════
# delete_by_id
# ═══════════════════════════════════════════════════════════════════════


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_returns_document(self, store, make_document) -> None:
        document_id = await store.insert(make_document())

        deleted = await store.delete_by_id(document_id)

        assert deleted is not None
        assert deleted.id == document_id
        assert await store.find_by_id(document_id) is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, store) -> None:
        assert await store.delete_by_id("nope") is None


class TestStorageErrors:
    @pytest.mark.asyncio
    async def test_missing_table_raises_storage_error(self, tmp_path: Path) -> None:
        store = SQLiteDocumentStore(tmp_path / "uninitialized.db")

        with pytest.raises(StorageError, match="document store operation failed") as exc_info:
            await store.find_recent(10)

        assert exc_info.value.provider_name == "sqlite"
        assert isinstance(exc_info.value.__cause__, aiosqlite.Error)

    @pytest.mark.asyncio
    async def test_unopenable_path_raises_storage_error(self, tmp_path: Path) -> None:
        # A directory cannot be opened as a database file.
        store = SQLiteDocumentStore(tmp_path)

        with pytest.raises(StorageError):
            await store.count()
