"""Chat session models.

A chat session is an append-only transcript keyed by an opaque session id.
Sessions are created lazily on the first query and upserted on every later
one; messages are embedded in the session and never addressed on their own.
"""

from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_BASE36 = string.digits + string.ascii_lowercase


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


def generate_session_id() -> str:
    """Return ``session_<epoch ms>_<random base36 suffix>``."""
    suffix = "".join(random.choices(_BASE36, k=6))  # noqa: S311
    return f"session_{int(time.time() * 1000)}_{suffix}"


class MessageRole(str, Enum):  # noqa: UP042
    USER = "user"
    ASSISTANT = "assistant"


class ChatResponseType(str, Enum):  # noqa: UP042
    """How an answer was produced; drives UI styling and confidence."""

    NO_DOCUMENTS = "no_documents"
    AI_RESPONSE = "ai_response"
    ERROR = "error"


class MessageMetadata(BaseModel):
    """Diagnostics attached to assistant messages."""

    model_config = ConfigDict(frozen=True)

    query: str | None = None
    confidence: float | None = None
    processing_time: int | None = None
    response_type: ChatResponseType | None = None
    matched_documents: int = 0


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
    metadata: MessageMetadata | None = None


class ChatSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    messages: list[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class DocumentContext(BaseModel):
    """Trimmed view of a document handed to the chat backend."""

    model_config = ConfigDict(frozen=True)

    filename: str
    key_value_pairs: list[dict[str, Any]] = Field(default_factory=list)
    extracted_text: str | None = None
    confidence: float = 0.0
    processing_method: str = ""
    created_at: datetime | None = None


class ChatAnswer(BaseModel):
    """Shaped answer returned by the chat orchestrator."""

    model_config = ConfigDict(frozen=True)

    content: str
    confidence: float
    type: ChatResponseType
    metadata: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ChatQueryResult(BaseModel):
    """Response of a chat query: the assistant message plus its session id."""

    model_config = ConfigDict(frozen=True)

    response: ChatMessage
    session_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChatHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    messages: list[ChatMessage] = Field(default_factory=list)
    total_messages: int = 0
