"""Key-value index models.

The index is a denormalized projection of every stored document's key-value
pairs: one :class:`IndexEntry` per non-empty pair, carrying the owning
document's filenames so key searches never need to join back to documents.

Values stay flexible (string, number, boolean, date, list, object) but are
always paired with an explicit :class:`ValueType` discriminant that is
inferred once at indexing time and persisted next to the value.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValueType(str, Enum):  # noqa: UP042
    """Closed set of value kinds stored in the index."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"


def infer_value_type(value: Any) -> ValueType:
    """Map a Python value onto its :class:`ValueType`, defaulting to string."""
    # bool is a subclass of int, so it must be tested first.
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, (int, float)):
        return ValueType.NUMBER
    if isinstance(value, (datetime, date)):
        return ValueType.DATE
    if isinstance(value, (list, tuple)):
        return ValueType.ARRAY
    if isinstance(value, dict):
        return ValueType.OBJECT
    return ValueType.STRING


def is_empty_value(value: Any) -> bool:
    """``None`` and the empty string are never indexed."""
    return value is None or value == ""


class IndexEntry(BaseModel):
    """One denormalized ``(document, key, value)`` fact."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    document_id: str
    filename: str
    original_filename: str
    key: str
    key_normalized: str
    value: Any
    value_type: ValueType = ValueType.STRING
    extracted_at: datetime


# ---------------------------------------------------------------------------
# Exact key search
# ---------------------------------------------------------------------------
class ValueFrequency(BaseModel):
    """How often one value occurs for a key, and in which files."""

    model_config = ConfigDict(frozen=True)

    value: Any
    count: int
    filenames: list[str] = Field(default_factory=list)


class ExactSearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_key: str
    search_type: str = "exact"
    results: list[IndexEntry] = Field(default_factory=list)
    unique_values: list[Any] = Field(default_factory=list)
    total_documents: int = 0
    total_results: int = 0
    value_frequency: list[ValueFrequency] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Partial key search
# ---------------------------------------------------------------------------
class KeyMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: Any
    value_type: ValueType


class DocumentMatchGroup(BaseModel):
    """All partial-search matches belonging to one document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    filename: str
    original_filename: str
    extracted_at: datetime
    matches: list[KeyMatch] = Field(default_factory=list)


class PartialSearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_key: str
    search_type: str = "partial"
    results: list[DocumentMatchGroup] = Field(default_factory=list)
    total_documents: int = 0
    total_matches: int = 0


# ---------------------------------------------------------------------------
# Global key usage
# ---------------------------------------------------------------------------
class KeyStatistic(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    count: int
    unique_value_count: int
    last_seen: datetime
