"""Abstract base class for chat transcript persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from docprocessor.models.chat import ChatMessage, ChatSession


# Concrete implementation: SQLiteChatSessionStore (docprocessor/providers/storage/)
class IChatSessionStore(ABC):
    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices.  Must be awaited once before use."""

    @abstractmethod
    async def upsert_append_messages(
        self, session_id: str, messages: list[ChatMessage]
    ) -> ChatSession:
        """Append *messages* to the session, creating it if needed."""

    @abstractmethod
    async def find_by_session_id(self, session_id: str) -> ChatSession | None:
        """Return the session with its messages in append order, or ``None``."""

    @abstractmethod
    async def delete_by_session_id(self, session_id: str) -> bool:
        """Delete the whole session; ``True`` if anything was removed."""
