"""Answers natural-language questions over the most recent documents.

The context window is bounded twice: only the newest
``context_documents`` documents are loaded, and each one's extracted text
is cut to ``text_truncate_chars`` characters before it is handed to the
extraction backend.

``answer`` never raises.  Any failure, whether in the store or in the
backend, is turned into a degraded ``error`` answer carrying the raw
message for diagnostics.
"""

from __future__ import annotations

import time

from docprocessor.interfaces.document_store import IDocumentStore
from docprocessor.models.chat import ChatAnswer, ChatResponseType, DocumentContext
from docprocessor.models.document import Document
from docprocessor.services.kv_gateway import KeyValueExtractionGateway
from docprocessor.utils.logging import get_logger

ANSWER_CONFIDENCE = 0.9
ERROR_CONFIDENCE = 0.1
DEFAULT_CONTEXT_DOCUMENTS = 20
DEFAULT_TEXT_TRUNCATE_CHARS = 1000

NO_DOCUMENTS_ANSWER = (
    "You haven't uploaded any documents yet. "
    "Please upload some documents first to ask questions about them."
)
ERROR_ANSWER = (
    "I encountered an error while processing your request. Please try rephrasing your "
    "question or check if your documents contain the information you're looking for."
)


class ChatQueryOrchestrator:
    """Builds the document context and shapes the backend's answer."""

    def __init__(
        self,
        document_store: IDocumentStore,
        gateway: KeyValueExtractionGateway,
        context_documents: int = DEFAULT_CONTEXT_DOCUMENTS,
        text_truncate_chars: int = DEFAULT_TEXT_TRUNCATE_CHARS,
    ) -> None:
        self._document_store = document_store
        self._gateway = gateway
        self._context_documents = context_documents
        self._text_truncate_chars = text_truncate_chars
        self._logger = get_logger(__name__)

    async def answer(self, query: str) -> ChatAnswer:
        start = time.perf_counter()
        try:
            documents = await self._document_store.find_recent(self._context_documents)
            if not documents:
                return ChatAnswer(
                    content=NO_DOCUMENTS_ANSWER,
                    confidence=ANSWER_CONFIDENCE,
                    type=ChatResponseType.NO_DOCUMENTS,
                )

            self._logger.info("chat_context_built", documents=len(documents))
            contexts = [self._to_context(doc) for doc in documents]
            content = await self._gateway.chat(query, contexts)
        except Exception as exc:
            self._logger.error("chat_query_failed", error=str(exc))
            return ChatAnswer(
                content=ERROR_ANSWER,
                confidence=ERROR_CONFIDENCE,
                type=ChatResponseType.ERROR,
                error=str(exc),
            )

        return ChatAnswer(
            content=content,
            confidence=ANSWER_CONFIDENCE,
            type=ChatResponseType.AI_RESPONSE,
            metadata={
                "documentsUsed": len(documents),
                "aiProvider": self._gateway.provider_name,
                "processingTime": int((time.perf_counter() - start) * 1000),
            },
        )

    def _to_context(self, document: Document) -> DocumentContext:
        text = document.extracted_text
        return DocumentContext(
            filename=document.original_filename,
            key_value_pairs=[pair.model_dump() for pair in document.key_value_pairs],
            extracted_text=text[: self._text_truncate_chars] if text else None,
            confidence=document.confidence,
            processing_method=document.processing_method.value,
            created_at=document.created_at,
        )
