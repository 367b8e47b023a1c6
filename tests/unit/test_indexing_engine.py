"""Unit tests for IndexingEngine against a temporary SQLite index."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from docprocessor.models.document import KeyValuePair
from docprocessor.models.index import ValueType
from docprocessor.providers.storage.sqlite_index_store import SQLiteKeyValueIndexStore
from docprocessor.services.indexing_engine import IndexingEngine

_BASE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)  # noqa: UP017


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> IndexingEngine:
    store = SQLiteKeyValueIndexStore(db_path=tmp_path / "index.db")
    await store.initialize()
    return IndexingEngine(store)


async def _index(engine: IndexingEngine, document_id: str, pairs, minutes: int = 0) -> int:  # noqa: ANN001
    return await engine.index(
        document_id,
        f"document-{document_id}.pdf",
        f"{document_id}.pdf",
        pairs,
        extracted_at=_BASE + timedelta(minutes=minutes),
    )


# ======================================================================
# index / remove_by_document
# ======================================================================


class TestIndex:
    @pytest.mark.asyncio
    async def test_skips_empty_values_and_keys(self, engine: IndexingEngine) -> None:
        pairs = [
            KeyValuePair(key="Name", value="Ada"),
            KeyValuePair(key="Empty", value=""),
            KeyValuePair(key="Missing", value=None),
            KeyValuePair(key="", value="orphan"),
            KeyValuePair(key="Zero", value=0),
            KeyValuePair(key="Flag", value=False),
        ]
        assert await _index(engine, "d1", pairs) == 3

    @pytest.mark.asyncio
    async def test_accepts_mapping_and_dict_items(self, engine: IndexingEngine) -> None:
        assert await _index(engine, "d1", {"Name": "Ada", "Age": 36}) == 2
        assert await _index(engine, "d2", [{"key": "Name", "value": "Bob"}]) == 1

    @pytest.mark.asyncio
    async def test_rejects_plain_string(self, engine: IndexingEngine) -> None:
        with pytest.raises(TypeError):
            await _index(engine, "d1", "Name: Ada")

    @pytest.mark.asyncio
    async def test_nothing_to_index(self, engine: IndexingEngine) -> None:
        assert await _index(engine, "d1", []) == 0

    @pytest.mark.asyncio
    async def test_duplicate_keys_kept(self, engine: IndexingEngine) -> None:
        await _index(
            engine,
            "d1",
            [KeyValuePair(key="Phone", value="111"), KeyValuePair(key="Phone", value="222")],
        )
        result = await engine.search_exact("Phone")
        assert result.total_results == 2

    @pytest.mark.asyncio
    async def test_entries_carry_type_and_normalized_key(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Total Amount": 99.5})
        (entry,) = (await engine.search_exact("Total Amount")).results
        assert entry.key_normalized == "total_amount"
        assert entry.value_type is ValueType.NUMBER
        assert entry.original_filename == "d1.pdf"

    @pytest.mark.asyncio
    async def test_remove_by_document(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Email": "a@x.co", "Name": "Ada"})
        await _index(engine, "d2", {"Email": "b@x.co"})

        assert await engine.remove_by_document("d1") == 2
        assert await engine.remove_by_document("d1") == 0

        result = await engine.search_partial("email")
        assert [g.document_id for g in result.results] == ["d2"]


# ======================================================================
# search_exact
# ======================================================================


class TestSearchExact:
    @pytest.mark.asyncio
    async def test_value_frequency(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Email": "a@x.co"}, minutes=0)
        await _index(engine, "d2", {"Email": "b@x.co"}, minutes=1)
        await _index(engine, "d3", {"Email": "a@x.co"}, minutes=2)

        result = await engine.search_exact("Email")

        assert result.search_type == "exact"
        assert result.total_results == 3
        assert result.total_documents == 3
        assert [e.document_id for e in result.results] == ["d3", "d2", "d1"]
        assert result.unique_values == ["a@x.co", "b@x.co"]
        assert [(f.value, f.count, f.filenames) for f in result.value_frequency] == [
            ("a@x.co", 2, ["d3.pdf", "d1.pdf"]),
            ("b@x.co", 1, ["d2.pdf"]),
        ]

    @pytest.mark.asyncio
    async def test_ties_keep_first_seen_order(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"City": "Oslo"}, minutes=0)
        await _index(engine, "d2", {"City": "Lima"}, minutes=1)

        result = await engine.search_exact("City")

        assert [f.value for f in result.value_frequency] == ["Lima", "Oslo"]

    @pytest.mark.asyncio
    async def test_frequency_counts_sum_to_results(self, engine: IndexingEngine) -> None:
        for i, value in enumerate(["x", "y", "x", "z", "x", "y"]):
            await _index(engine, f"d{i}", {"Code": value}, minutes=i)

        result = await engine.search_exact("Code")

        assert sum(f.count for f in result.value_frequency) == result.total_results
        assert [f.value for f in result.value_frequency] == ["x", "y", "z"]

    @pytest.mark.asyncio
    async def test_structured_values_grouped(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Tags": ["a", "b"]}, minutes=0)
        await _index(engine, "d2", {"Tags": ["a", "b"]}, minutes=1)

        result = await engine.search_exact("Tags")

        assert [(f.value, f.count) for f in result.value_frequency] == [(["a", "b"], 2)]

    @pytest.mark.asyncio
    async def test_true_and_one_stay_distinct(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Flag": True}, minutes=0)
        await _index(engine, "d2", {"Flag": 1}, minutes=1)

        result = await engine.search_exact("Flag")

        assert len(result.value_frequency) == 2

    @pytest.mark.asyncio
    async def test_same_document_counted_once(self, engine: IndexingEngine) -> None:
        await _index(
            engine,
            "d1",
            [KeyValuePair(key="Phone", value="111"), KeyValuePair(key="Phone", value="111")],
        )
        result = await engine.search_exact("Phone")
        assert result.total_documents == 1
        assert result.value_frequency[0].filenames == ["d1.pdf"]

    @pytest.mark.asyncio
    async def test_no_matches(self, engine: IndexingEngine) -> None:
        result = await engine.search_exact("Nothing")
        assert result.results == []
        assert result.total_documents == 0
        assert result.value_frequency == []


# ======================================================================
# search_partial
# ======================================================================


class TestSearchPartial:
    @pytest.mark.asyncio
    async def test_groups_by_document(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Email": "a@x.co", "Email Address": "a2@x.co", "Name": "Ada"})
        await _index(engine, "d2", {"Email": "b@x.co"}, minutes=1)

        result = await engine.search_partial("EMAIL")

        assert result.search_type == "partial"
        assert result.search_key == "EMAIL"
        assert result.total_matches == 3
        assert result.total_documents == 2
        assert [g.document_id for g in result.results] == ["d2", "d1"]
        assert [m.key for m in result.results[1].matches] == ["Email", "Email Address"]

    @pytest.mark.asyncio
    async def test_query_is_normalized(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"First Name": "Ada"})
        result = await engine.search_partial("first-name")
        assert result.total_matches == 1

    @pytest.mark.asyncio
    async def test_total_matches_equals_group_sizes(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Phone": "1", "Phone Ext": "2"})
        await _index(engine, "d2", {"Mobile Phone": "3"})

        result = await engine.search_partial("phone")

        assert result.total_matches == sum(len(g.matches) for g in result.results)


# ======================================================================
# Statistics and diagnostic lookups
# ======================================================================


class TestStatisticsAndLookups:
    @pytest.mark.asyncio
    async def test_key_statistics(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Email": "a@x.co", "Name": "Ada"})
        await _index(engine, "d2", {"Email": "a@x.co"})

        stats = await engine.key_statistics()

        assert [(s.key, s.count, s.unique_value_count) for s in stats] == [
            ("Email", 2, 1),
            ("Name", 1, 1),
        ]

    @pytest.mark.asyncio
    async def test_search_by_key_term(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"Phone Number": "555", "Name": "Ada"})
        entries = await engine.search_by_key_term("phone number")
        assert [e.key for e in entries] == ["Phone Number"]

    @pytest.mark.asyncio
    async def test_search_by_value(self, engine: IndexingEngine) -> None:
        await _index(engine, "d1", {"City": "Springfield", "Name": "Ada"})
        entries = await engine.search_by_value("field")
        assert [e.value for e in entries] == ["Springfield"]
