"""Unit tests for ChatQueryOrchestrator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from docprocessor.models.chat import ChatResponseType
from docprocessor.providers.extraction.mock_extractor import MockKeyValueExtractor
from docprocessor.services.chat_orchestrator import (
    ERROR_ANSWER,
    NO_DOCUMENTS_ANSWER,
    ChatQueryOrchestrator,
)
from docprocessor.services.kv_gateway import KeyValueExtractionGateway
from docprocessor.utils.errors import LLMError


def _store(documents: list) -> MagicMock:
    store = MagicMock()
    store.find_recent = AsyncMock(return_value=documents)
    return store


class TestChatQueryOrchestrator:
    @pytest.mark.asyncio
    async def test_no_documents(self) -> None:
        gateway = KeyValueExtractionGateway(MockKeyValueExtractor())
        orchestrator = ChatQueryOrchestrator(_store([]), gateway)

        answer = await orchestrator.answer("what is my email?")

        assert answer.type is ChatResponseType.NO_DOCUMENTS
        assert answer.content == NO_DOCUMENTS_ANSWER
        assert answer.confidence == 0.9
        assert answer.error is None

    @pytest.mark.asyncio
    async def test_answers_from_documents(self, make_document) -> None:
        store = _store([make_document()])
        orchestrator = ChatQueryOrchestrator(store, KeyValueExtractionGateway(MockKeyValueExtractor()))

        answer = await orchestrator.answer("What is the email?")

        assert answer.type is ChatResponseType.AI_RESPONSE
        assert answer.content == "**john@example.com**"
        assert answer.confidence == 0.9
        assert answer.metadata["documentsUsed"] == 1
        assert answer.metadata["aiProvider"] == "mock"
        assert isinstance(answer.metadata["processingTime"], int)

    @pytest.mark.asyncio
    async def test_context_is_bounded(self, make_document) -> None:
        store = _store([make_document(extracted_text="x" * 5000)])
        extractor = MagicMock()
        extractor.chat_answer = AsyncMock(return_value="ok")
        extractor.get_provider_name.return_value = "anthropic"
        orchestrator = ChatQueryOrchestrator(
            store,
            KeyValueExtractionGateway(extractor),
            context_documents=5,
            text_truncate_chars=100,
        )

        await orchestrator.answer("anything")

        store.find_recent.assert_awaited_once_with(5)
        (query, contexts) = extractor.chat_answer.await_args.args
        assert query == "anything"
        assert len(contexts[0].extracted_text) == 100
        assert contexts[0].filename == "invoice.pdf"
        assert contexts[0].key_value_pairs[0] == {"key": "Name", "value": "John Doe"}

    @pytest.mark.asyncio
    async def test_backend_failure_degrades(self, make_document) -> None:
        extractor = MagicMock()
        extractor.chat_answer = AsyncMock(side_effect=LLMError("rate limited", provider_name="openai"))
        extractor.get_provider_name.return_value = "openai"
        orchestrator = ChatQueryOrchestrator(_store([make_document()]), KeyValueExtractionGateway(extractor))

        answer = await orchestrator.answer("what is the total?")

        assert answer.type is ChatResponseType.ERROR
        assert answer.content == ERROR_ANSWER
        assert answer.confidence == 0.1
        assert "rate limited" in answer.error

    @pytest.mark.asyncio
    async def test_store_failure_degrades(self) -> None:
        store = MagicMock()
        store.find_recent = AsyncMock(side_effect=RuntimeError("database is locked"))
        orchestrator = ChatQueryOrchestrator(store, KeyValueExtractionGateway(MockKeyValueExtractor()))

        answer = await orchestrator.answer("hello")

        assert answer.type is ChatResponseType.ERROR
        assert answer.error == "database is locked"
