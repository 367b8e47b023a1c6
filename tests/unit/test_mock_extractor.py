"""Unit tests for the deterministic regex key-value extractor."""

from __future__ import annotations

import pytest

from docprocessor.models.chat import DocumentContext
from docprocessor.models.document import KeyValuePair, ProcessingMethod
from docprocessor.providers.extraction.mock_extractor import (
    MAX_PAIRS,
    NOT_FOUND_ANSWER,
    MockKeyValueExtractor,
)


@pytest.fixture()
def extractor() -> MockKeyValueExtractor:
    return MockKeyValueExtractor()


def _context(*pairs: tuple[str, object], filename: str = "doc.pdf") -> DocumentContext:
    return DocumentContext(
        filename=filename,
        key_value_pairs=[{"key": k, "value": v} for k, v in pairs],
    )


def _as_tuples(pairs: list[KeyValuePair]) -> list[tuple[str, object]]:
    return [(p.key, p.value) for p in pairs]


# ======================================================================
# extract_pairs
# ======================================================================


class TestExtractPairs:
    @pytest.mark.asyncio
    async def test_colon_lines(self, extractor: MockKeyValueExtractor) -> None:
        pairs = await extractor.extract_pairs("Name: John Doe\nEmail: john@example.com")
        # The email detector finds the same (Email, john@example.com) pair and is deduplicated.
        assert _as_tuples(pairs) == [("Name", "John Doe"), ("Email", "john@example.com")]

    @pytest.mark.asyncio
    async def test_pattern_detectors(self, extractor: MockKeyValueExtractor) -> None:
        text = "Invoice Date: 2024-01-15\nTotal: $1,234.56\nCall (555) 123-4567"
        pairs = await extractor.extract_pairs(text)
        assert _as_tuples(pairs) == [
            ("Invoice Date", "2024-01-15"),
            ("Date", "2024-01-15"),
            ("Total", "$1,234.56"),
            ("Amount", "$1,234.56"),
            ("Phone", "(555) 123-4567"),
        ]

    @pytest.mark.asyncio
    async def test_splits_at_first_colon(self, extractor: MockKeyValueExtractor) -> None:
        pairs = await extractor.extract_pairs("Website: http://example.com")
        assert _as_tuples(pairs) == [("Website", "http://example.com")]

    @pytest.mark.asyncio
    async def test_skips_empty_keys_and_values(self, extractor: MockKeyValueExtractor) -> None:
        pairs = await extractor.extract_pairs("Note:\n: orphan value\n\n   \n")
        assert pairs == []

    @pytest.mark.asyncio
    async def test_trims_keys_and_values(self, extractor: MockKeyValueExtractor) -> None:
        pairs = await extractor.extract_pairs("   Policy No  :   A-77   ")
        assert _as_tuples(pairs) == [("Policy No", "A-77")]

    @pytest.mark.asyncio
    async def test_exact_duplicates_dropped(self, extractor: MockKeyValueExtractor) -> None:
        pairs = await extractor.extract_pairs("City: Paris\nCity: Paris\nCity: Lyon")
        assert _as_tuples(pairs) == [("City", "Paris"), ("City", "Lyon")]

    @pytest.mark.asyncio
    async def test_caps_at_max_pairs(self, extractor: MockKeyValueExtractor) -> None:
        text = "\n".join(f"Field {i}: value {i}" for i in range(30))
        pairs = await extractor.extract_pairs(text)
        assert len(pairs) == MAX_PAIRS
        assert pairs[0].key == "Field 0"
        assert pairs[-1].key == f"Field {MAX_PAIRS - 1}"

    @pytest.mark.asyncio
    async def test_deterministic(self, extractor: MockKeyValueExtractor) -> None:
        text = "Name: Ada\nPhone: 555-123-4567\nDue 01/02/2024 $99"
        first = await extractor.extract_pairs(text)
        second = await extractor.extract_pairs(text)
        assert first == second

    def test_identity(self, extractor: MockKeyValueExtractor) -> None:
        assert extractor.get_provider_name() == "mock"
        assert extractor.get_processing_method() is ProcessingMethod.MOCK


# ======================================================================
# chat_answer
# ======================================================================


class TestChatAnswer:
    @pytest.mark.asyncio
    async def test_single_match_is_emphasized(self, extractor: MockKeyValueExtractor) -> None:
        docs = [_context(("Name", "John Doe"), ("Email", "john@example.com"))]
        answer = await extractor.chat_answer("What is the email?", docs)
        assert answer == "**john@example.com**"

    @pytest.mark.asyncio
    async def test_domain_term_matches(self, extractor: MockKeyValueExtractor) -> None:
        docs = [_context(("License Number", "D123-456"))]
        answer = await extractor.chat_answer("what's my license?", docs)
        assert answer == "**D123-456**"

    @pytest.mark.asyncio
    async def test_few_values_listed(self, extractor: MockKeyValueExtractor) -> None:
        docs = [
            _context(("Phone", "111")),
            _context(("Phone", "222")),
            _context(("Phone", "222")),
        ]
        answer = await extractor.chat_answer("phone numbers?", docs)
        assert answer == "**111**, **222**"

    @pytest.mark.asyncio
    async def test_many_values_summarized(self, extractor: MockKeyValueExtractor) -> None:
        docs = [_context(("Amount", f"${i}")) for i in range(5)]
        answer = await extractor.chat_answer("list every amount", docs)
        assert answer == "Found 5 matches: **$0**, **$1**, **$2**..."

    @pytest.mark.asyncio
    async def test_no_match(self, extractor: MockKeyValueExtractor) -> None:
        docs = [_context(("Name", "John Doe"))]
        answer = await extractor.chat_answer("what is the weather?", docs)
        assert answer == NOT_FOUND_ANSWER
