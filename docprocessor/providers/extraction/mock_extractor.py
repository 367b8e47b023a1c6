"""Deterministic regex-based key-value extractor.

Used when no model backend is configured, and in tests.  Output depends
only on the input text: no randomness, no clock, no I/O.

Per non-blank line:
    * ``Key: value`` lines yield ``(Key, value)`` split at the first colon.
    * Independently, the first email, phone, date and currency amount on the
      line each yield an ``Email`` / ``Phone`` / ``Date`` / ``Amount`` pair.

Exact ``(key, value)`` duplicates are dropped and the result is capped at
twenty pairs, keeping first-seen order.
"""

from __future__ import annotations

import re
from typing import Any

from docprocessor.interfaces.key_value_extractor import IKeyValueExtractor
from docprocessor.models.chat import DocumentContext
from docprocessor.models.document import KeyValuePair, ProcessingMethod

MAX_PAIRS = 20

NOT_FOUND_ANSWER = (
    "I couldn't find that information in your documents. Try rephrasing your question."
)

# Order matters: patterns are applied in this order on every line.
_DETECTORS: list[tuple[str, re.Pattern[str]]] = [
    ("Email", re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")),
    ("Phone", re.compile(r"(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})")),
    ("Date", re.compile(r"(\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|\d{1,2}/\d{1,2}/\d{2,4})")),
    ("Amount", re.compile(r"(\$[\d,]+\.?\d*)")),
]

_DOMAIN_TERMS = ("license", "number", "name", "phone", "email", "address")


class MockKeyValueExtractor(IKeyValueExtractor):
    """Regex extractor and keyword-matching chat responder."""

    def __init__(self, max_pairs: int = MAX_PAIRS) -> None:
        self._max_pairs = max_pairs

    async def extract_pairs(self, text: str) -> list[KeyValuePair]:
        candidates: list[tuple[str, str]] = []
        for line in text.split("\n"):
            if not line.strip():
                continue
            if ":" in line:
                key, _, rest = line.partition(":")
                value = rest.strip()
                if key.strip() and value:
                    candidates.append((key.strip(), value))
            for label, pattern in _DETECTORS:
                match = pattern.search(line)
                if match:
                    candidates.append((label, match.group(1)))

        # dict preserves insertion order, so this dedups keeping first-seen.
        unique = list(dict.fromkeys(candidates))
        return [KeyValuePair(key=k, value=v) for k, v in unique[: self._max_pairs]]

    async def chat_answer(self, query: str, documents: list[DocumentContext]) -> str:
        query_lower = query.lower()
        matches: list[Any] = []
        for doc in documents:
            for pair in doc.key_value_pairs:
                key_lower = str(pair.get("key", "")).lower()
                if key_lower in query_lower or any(
                    term in key_lower and term in query_lower for term in _DOMAIN_TERMS
                ):
                    matches.append(pair.get("value"))

        if not matches:
            return NOT_FOUND_ANSWER
        if len(matches) == 1:
            return f"**{_display(matches[0])}**"

        unique_values: list[Any] = []
        for value in matches:
            if value not in unique_values:
                unique_values.append(value)
        emphasized = ", ".join(f"**{_display(v)}**" for v in unique_values[:3])
        if len(unique_values) <= 3:
            return emphasized
        return f"Found {len(unique_values)} matches: {emphasized}..."

    def get_provider_name(self) -> str:
        return "mock"

    def get_processing_method(self) -> ProcessingMethod:
        return ProcessingMethod.MOCK


def _display(value: Any) -> str:
    return "" if value is None else str(value)
