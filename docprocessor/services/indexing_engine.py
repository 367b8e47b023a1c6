"""Denormalized key-value index over processed documents.

Every non-empty pair of a document becomes one :class:`IndexEntry` that
carries the document's filenames, so key lookups never join back to the
document store.  Documents are immutable after creation; re-indexing means
``remove_by_document`` followed by ``index``.

Reads:
    * ``search_exact``    raw key equality, with value frequency aggregation
    * ``search_partial``  normalized-key substring, grouped by document
    * ``key_statistics``  usage per raw key, most frequent first
    * ``search_by_key_term`` / ``search_by_value``  diagnostic lookups

Aggregation and grouping happen here, not in the store.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from docprocessor.interfaces.index_store import IKeyValueIndexStore
from docprocessor.models.document import KeyValuePair
from docprocessor.models.index import (
    DocumentMatchGroup,
    ExactSearchResult,
    IndexEntry,
    KeyMatch,
    KeyStatistic,
    PartialSearchResult,
    ValueFrequency,
    infer_value_type,
    is_empty_value,
)
from docprocessor.utils.logging import get_logger
from docprocessor.utils.text_normalizer import normalize_key

DEFAULT_SEARCH_LIMIT = 100
DEFAULT_STATISTICS_LIMIT = 50
DEFAULT_LOOKUP_LIMIT = 50

PairsInput = Sequence[KeyValuePair | Mapping[str, Any]] | Mapping[str, Any]


def _value_identity(value: Any) -> Any:
    """Hashable stand-in for *value*, so lists and dicts can be deduplicated."""
    try:
        hash(value)
    except TypeError:
        return ("__json__", json.dumps(value, sort_keys=True, default=str))
    # 1 == 1.0 == True in Python; keep them apart the way JSON does.
    return (type(value).__name__, value)


def _as_pairs(pairs: PairsInput) -> list[tuple[str, Any]]:
    """Accept a list of pairs or a plain ``{key: value}`` map."""
    if isinstance(pairs, Mapping):
        return [(str(k), v) for k, v in pairs.items()]
    if isinstance(pairs, (str, bytes)) or not isinstance(pairs, Sequence):
        raise TypeError("pairs must be a list of {key, value} items or a key→value mapping")

    result: list[tuple[str, Any]] = []
    for item in pairs:
        if isinstance(item, KeyValuePair):
            result.append((item.key, item.value))
        elif isinstance(item, Mapping):
            result.append((item.get("key"), item.get("value")))
        else:
            raise TypeError(f"Unsupported pair item: {item!r}")
    return result


class IndexingEngine:
    """Builds and queries the key-value index."""

    def __init__(self, store: IKeyValueIndexStore) -> None:
        self._store = store
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def index(
        self,
        document_id: str,
        filename: str,
        original_filename: str,
        pairs: PairsInput,
        extracted_at: datetime | None = None,
    ) -> int:
        """Index the non-empty pairs of one document; returns the number written.

        Pairs without a key, or whose value is ``None`` or ``""``, are skipped.
        Duplicate keys are kept.
        """
        timestamp = extracted_at or datetime.now(tz=timezone.utc)  # noqa: UP017
        entries = [
            IndexEntry(
                document_id=document_id,
                filename=filename,
                original_filename=original_filename,
                key=str(key),
                key_normalized=normalize_key(str(key)),
                value=value,
                value_type=infer_value_type(value),
                extracted_at=timestamp,
            )
            for key, value in _as_pairs(pairs)
            if key and not is_empty_value(value)
        ]
        if not entries:
            return 0

        written = await self._store.insert_many(entries)
        self._logger.info("document_indexed", document_id=document_id, entries=written)
        return written

    async def remove_by_document(self, document_id: str) -> int:
        """Delete every entry of *document_id*; 0 when there were none."""
        deleted = await self._store.delete_by_document(document_id)
        self._logger.info("document_index_removed", document_id=document_id, entries=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def search_exact(self, key: str, limit: int = DEFAULT_SEARCH_LIMIT) -> ExactSearchResult:
        """Entries whose raw key equals *key*, newest first, with value frequencies.

        ``value_frequency`` is ordered by count descending; equal counts keep
        the order in which the value first appears in ``results``.
        """
        results = await self._store.find_by_key(key, limit)

        buckets: dict[Any, dict[str, Any]] = {}
        for entry in results:
            identity = _value_identity(entry.value)
            bucket = buckets.setdefault(identity, {"value": entry.value, "count": 0, "filenames": []})
            bucket["count"] += 1
            if entry.original_filename not in bucket["filenames"]:
                bucket["filenames"].append(entry.original_filename)

        # sorted() is stable, so first-seen order breaks ties.
        frequency = sorted(buckets.values(), key=lambda b: b["count"], reverse=True)

        return ExactSearchResult(
            search_key=key,
            results=results,
            unique_values=[b["value"] for b in buckets.values()],
            total_documents=len({e.document_id for e in results}),
            total_results=len(results),
            value_frequency=[ValueFrequency(**b) for b in frequency],
        )

    async def search_partial(
        self, key: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> PartialSearchResult:
        """Entries whose normalized key contains ``normalize_key(key)``, grouped by document."""
        normalized = normalize_key(key)
        results = await self._store.find_by_normalized_fragment(normalized, limit)

        groups: dict[str, dict[str, Any]] = {}
        for entry in results:
            group = groups.setdefault(
                entry.document_id,
                {
                    "document_id": entry.document_id,
                    "filename": entry.filename,
                    "original_filename": entry.original_filename,
                    "extracted_at": entry.extracted_at,
                    "matches": [],
                },
            )
            group["matches"].append(
                KeyMatch(key=entry.key, value=entry.value, value_type=entry.value_type)
            )

        return PartialSearchResult(
            search_key=key,
            results=[DocumentMatchGroup(**g) for g in groups.values()],
            total_documents=len(groups),
            total_matches=len(results),
        )

    async def key_statistics(self, limit: int = DEFAULT_STATISTICS_LIMIT) -> list[KeyStatistic]:
        return await self._store.key_statistics(limit)

    async def search_by_key_term(
        self, term: str, limit: int = DEFAULT_LOOKUP_LIMIT
    ) -> list[IndexEntry]:
        """Entries whose raw key contains *term* or normalized key contains its normal form."""
        return await self._store.find_by_key_term(term, normalize_key(term), limit)

    async def search_by_value(self, term: str, limit: int = DEFAULT_LOOKUP_LIMIT) -> list[IndexEntry]:
        """String-valued entries containing *term*, case-insensitive."""
        return await self._store.find_by_value_fragment(term, limit)
