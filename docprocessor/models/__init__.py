"""Domain models: re-exports all public model classes.

The models are organized by domain concern:
    - chat.py     : Chat sessions, messages and shaped chat answers
    - document.py : Uploads, extracted text and the canonical Document
    - index.py    : Key-value index entries and search result shapes
"""

from __future__ import annotations

from docprocessor.models.chat import (
    ChatAnswer,
    ChatHistory,
    ChatMessage,
    ChatQueryResult,
    ChatResponseType,
    ChatSession,
    DocumentContext,
    MessageMetadata,
    MessageRole,
    generate_session_id,
)
from docprocessor.models.document import (
    Document,
    DocumentMetadata,
    DocumentStats,
    DocumentSummary,
    ExtractedText,
    KeyValuePair,
    MediaType,
    ProcessingMethod,
    ProcessingResult,
    TextSource,
    UploadedFile,
)
from docprocessor.models.index import (
    DocumentMatchGroup,
    ExactSearchResult,
    IndexEntry,
    KeyMatch,
    KeyStatistic,
    PartialSearchResult,
    ValueFrequency,
    ValueType,
    infer_value_type,
    is_empty_value,
)

__all__ = [
    "ChatAnswer",
    "ChatHistory",
    "ChatMessage",
    "ChatQueryResult",
    "ChatResponseType",
    "ChatSession",
    "Document",
    "DocumentContext",
    "DocumentMatchGroup",
    "DocumentMetadata",
    "DocumentStats",
    "DocumentSummary",
    "ExactSearchResult",
    "ExtractedText",
    "IndexEntry",
    "KeyMatch",
    "KeyStatistic",
    "KeyValuePair",
    "MediaType",
    "MessageMetadata",
    "MessageRole",
    "PartialSearchResult",
    "ProcessingMethod",
    "ProcessingResult",
    "TextSource",
    "UploadedFile",
    "ValueFrequency",
    "ValueType",
    "generate_session_id",
    "infer_value_type",
    "is_empty_value",
]
