"""Chat queries and their persisted transcripts.

Each answered query appends two messages to its session, the user's
question and the assistant's answer, in one upsert.  Sessions are created
on first use; a caller without a session id gets a freshly generated one.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

from docprocessor.interfaces.chat_store import IChatSessionStore
from docprocessor.models.chat import (
    ChatHistory,
    ChatMessage,
    ChatQueryResult,
    MessageMetadata,
    MessageRole,
    generate_session_id,
)
from docprocessor.services.chat_orchestrator import ChatQueryOrchestrator
from docprocessor.utils.logging import get_logger

DEFAULT_HISTORY_LIMIT = 50


class ChatService:
    def __init__(
        self,
        orchestrator: ChatQueryOrchestrator,
        chat_store: IChatSessionStore,
    ) -> None:
        self._orchestrator = orchestrator
        self._chat_store = chat_store
        self._logger = get_logger(__name__)

    async def chat_query(self, query: str, session_id: str | None = None) -> ChatQueryResult:
        """Answer *query* and record the exchange under *session_id*.

        Raises ``ValueError`` for a blank query; everything downstream of the
        orchestrator is already failure-proof.
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("Query is required")

        answer = await self._orchestrator.answer(query)
        session_id = session_id or generate_session_id()

        now = datetime.now(tz=timezone.utc)  # noqa: UP017
        stamp = int(time.time() * 1000)
        user_message = ChatMessage(
            id=f"msg_{stamp}_user",
            role=MessageRole.USER,
            content=query,
            timestamp=now,
        )
        assistant_message = ChatMessage(
            id=f"msg_{stamp}_assistant",
            role=MessageRole.ASSISTANT,
            content=answer.content,
            timestamp=now,
            metadata=MessageMetadata(
                query=query,
                confidence=answer.confidence,
                processing_time=answer.metadata.get("processingTime"),
                response_type=answer.type,
                matched_documents=answer.metadata.get("documentsUsed", 0),
            ),
        )
        await self._chat_store.upsert_append_messages(session_id, [user_message, assistant_message])
        self._logger.info(
            "chat_query_answered",
            session_id=session_id,
            response_type=answer.type.value,
        )

        metadata = {
            "confidence": answer.confidence,
            "type": answer.type.value,
            **answer.metadata,
        }
        if answer.error:
            metadata["error"] = answer.error
        return ChatQueryResult(response=assistant_message, session_id=session_id, metadata=metadata)

    async def chat_history(self, session_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> ChatHistory:
        """The last *limit* messages of the session, oldest first."""
        session = await self._chat_store.find_by_session_id(session_id)
        if session is None:
            return ChatHistory(session_id=session_id)

        # Stable sort: messages sharing a timestamp keep their append order.
        ordered = sorted(session.messages, key=lambda m: m.timestamp)
        recent = ordered[-limit:] if limit > 0 else []
        return ChatHistory(
            session_id=session_id,
            messages=recent,
            total_messages=len(session.messages),
        )

    async def clear_chat_history(self, session_id: str) -> bool:
        return await self._chat_store.delete_by_session_id(session_id)
