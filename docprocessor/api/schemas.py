"""Pydantic request/response schemas for the document processor API.

The wire format is camelCase (``keyValuePairs``, ``sessionId``,
``processingStep``); the Python side stays snake_case.  Every schema
derives from :class:`ApiModel`, which generates the camelCase aliases and
still accepts field names on input, so a domain model's ``model_dump()``
validates straight into its response schema.

Convention: request schemas end with "Request", response schemas end with
"Response".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorResponse(ApiModel):
    """Sanitized error body returned by the error handling middleware."""

    error: str
    detail: str = ""


class ProcessingErrorDetails(ApiModel):
    """Diagnostics attached to processing errors outside production."""

    message: str
    stack: str = ""
    filename: str = "unknown"
    mime_type: str = "unknown"
    file_size: int = 0
    timestamp: datetime
    processing_step: str = "unknown"
    raw_output: str | None = None


class ProcessingErrorResponse(ApiModel):
    error: str
    kind: str | None = None
    key_value_pairs: list[Any] = Field(default_factory=list)
    details: ProcessingErrorDetails | None = None


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class KeyValuePairResponse(ApiModel):
    key: str
    value: Any = None


class ProcessDocumentResponse(ApiModel):
    """Result of a successful upload."""

    id: str
    key_value_pairs: list[KeyValuePairResponse]
    confidence: float
    original_filename: str
    processing_time_ms: int
    indexed_entries: int = 0


class DocumentMetadataResponse(ApiModel):
    file_size: int
    mime_type: str
    processing_time_ms: int
    extracted_at: datetime
    text_source: str | None = None


class DocumentResponse(ApiModel):
    """Full stored document."""

    id: str
    filename: str
    original_filename: str
    key_value_pairs: list[KeyValuePairResponse]
    confidence: float
    extracted_text: str
    processing_method: str
    metadata: DocumentMetadataResponse
    created_at: datetime


class DocumentSummaryResponse(ApiModel):
    id: str
    original_filename: str
    key_value_pairs: list[KeyValuePairResponse]
    confidence: float
    processing_method: str
    created_at: datetime
    file_size: int = 0


class DocumentListResponse(ApiModel):
    documents: list[DocumentSummaryResponse]
    count: int


class FilenameSearchResponse(ApiModel):
    documents: list[DocumentSummaryResponse]
    count: int
    query: str


class DeleteDocumentResponse(ApiModel):
    message: str = "Document deleted successfully"
    document_id: str
    removed_index_entries: int


class DocumentStatsResponse(ApiModel):
    total_documents: int
    recent_documents: int


# ---------------------------------------------------------------------------
# Key-value index
# ---------------------------------------------------------------------------


class IndexEntryResponse(ApiModel):
    id: int | None = None
    document_id: str
    filename: str
    original_filename: str
    key: str
    key_normalized: str
    value: Any = None
    value_type: str
    extracted_at: datetime


class ValueFrequencyResponse(ApiModel):
    value: Any = None
    count: int
    filenames: list[str]


class ExactKeySearchResponse(ApiModel):
    search_key: str
    search_type: str = "exact"
    results: list[IndexEntryResponse]
    unique_values: list[Any]
    total_documents: int
    total_results: int
    value_frequency: list[ValueFrequencyResponse]


class KeyMatchResponse(ApiModel):
    key: str
    value: Any = None
    value_type: str


class DocumentMatchGroupResponse(ApiModel):
    document_id: str
    filename: str
    original_filename: str
    extracted_at: datetime
    matches: list[KeyMatchResponse]


class PartialKeySearchResponse(ApiModel):
    search_key: str
    search_type: str = "partial"
    results: list[DocumentMatchGroupResponse]
    total_documents: int
    total_matches: int


class KeyStatisticResponse(ApiModel):
    key: str
    count: int
    unique_value_count: int
    last_seen: datetime


class KeyStatisticsResponse(ApiModel):
    key_statistics: list[KeyStatisticResponse]
    total_keys: int


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatQueryRequest(ApiModel):
    query: str = Field(..., min_length=1, max_length=2000)
    session_id: str | None = None


class ChatMessageMetadataResponse(ApiModel):
    query: str | None = None
    confidence: float | None = None
    processing_time: int | None = None
    response_type: str | None = None
    matched_documents: int = 0


class ChatMessageResponse(ApiModel):
    id: str
    role: str
    content: str
    timestamp: datetime
    metadata: ChatMessageMetadataResponse | None = None


class ChatQueryResponse(ApiModel):
    response: ChatMessageResponse
    session_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChatHistoryResponse(ApiModel):
    messages: list[ChatMessageResponse]
    session_id: str
    total_messages: int


class MessageResponse(ApiModel):
    message: str


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(ApiModel):
    status: str = "OK"
    service: str = "document-ai-processor"
    ai_provider: str
