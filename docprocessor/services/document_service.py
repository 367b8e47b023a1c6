"""Document lifecycle: upload processing, lookup, search and deletion.

``process`` sequences the pipeline for one upload:

    store bytes → extract text → extract pairs → insert document → index pairs

The stored upload is removed when processing ends, however it ends.
Indexing runs only after the document is persisted and is not atomic with
it: a failure in between leaves a document that can be fetched by id but
is not reachable through key search.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

from docprocessor.interfaces.document_store import IDocumentStore
from docprocessor.interfaces.file_storage import IFileStorage
from docprocessor.models.document import (
    Document,
    DocumentMetadata,
    DocumentStats,
    DocumentSummary,
    ProcessingResult,
    UploadedFile,
)
from docprocessor.models.index import (
    ExactSearchResult,
    IndexEntry,
    KeyStatistic,
    PartialSearchResult,
)
from docprocessor.services.indexing_engine import DEFAULT_LOOKUP_LIMIT, IndexingEngine
from docprocessor.services.kv_gateway import KeyValueExtractionGateway
from docprocessor.services.text_extraction import TextExtractionPipeline
from docprocessor.utils.errors import DocumentNotFoundError, NoTextContentError
from docprocessor.utils.logging import get_logger

# No real confidence score is computed; every processed document gets this.
DOCUMENT_CONFIDENCE = 0.85
RECENT_DOCUMENTS_LIMIT = 50
RECENT_WINDOW = timedelta(days=7)


class DocumentService:
    """Entry point for every document operation exposed over HTTP and CLI."""

    def __init__(
        self,
        file_storage: IFileStorage,
        pipeline: TextExtractionPipeline,
        gateway: KeyValueExtractionGateway,
        document_store: IDocumentStore,
        indexing_engine: IndexingEngine,
        confidence: float = DOCUMENT_CONFIDENCE,
    ) -> None:
        self._file_storage = file_storage
        self._pipeline = pipeline
        self._gateway = gateway
        self._document_store = document_store
        self._indexing_engine = indexing_engine
        self._confidence = confidence
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def process(self, upload: UploadedFile) -> ProcessingResult:
        """Run the full pipeline for *upload* and return the stored result.

        Raises
        ------
        ExtractionError
            Text extraction failed; ``processing_step`` says where.
        NoTextContentError
            The file was empty or OCR found nothing on it.
        LLMError
            The key-value backend failed.
        """
        start = time.perf_counter()
        self._logger.info(
            "document_processing_started",
            original_filename=upload.original_filename,
            mime_type=upload.mime_type,
            size=upload.size,
        )
        if upload.size == 0:
            raise NoTextContentError()

        with self._file_storage.stored(upload.content, upload.original_filename) as path:
            extracted = await self._pipeline.extract_text(path, upload.mime_type)

            pairs = await self._gateway.extract(extracted.text)
            processing_time_ms = int((time.perf_counter() - start) * 1000)
            extracted_at = datetime.now(tz=timezone.utc)  # noqa: UP017

            document = Document(
                filename=path.name,
                original_filename=upload.original_filename,
                key_value_pairs=pairs,
                confidence=self._confidence,
                extracted_text=extracted.text,
                processing_method=self._gateway.processing_method,
                metadata=DocumentMetadata(
                    file_size=upload.size,
                    mime_type=upload.mime_type,
                    processing_time_ms=processing_time_ms,
                    extracted_at=extracted_at,
                    text_source=extracted.source,
                ),
                created_at=extracted_at,
            )
            document_id = await self._document_store.insert(document)
            indexed = await self._indexing_engine.index(
                document_id,
                document.filename,
                document.original_filename,
                pairs,
                extracted_at,
            )

        self._logger.info(
            "document_processing_complete",
            document_id=document_id,
            pair_count=len(pairs),
            indexed_entries=indexed,
            text_source=extracted.source.value,
            processing_time_ms=processing_time_ms,
        )
        return ProcessingResult(
            id=document_id,
            key_value_pairs=pairs,
            confidence=self._confidence,
            original_filename=upload.original_filename,
            processing_time_ms=processing_time_ms,
            indexed_entries=indexed,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def list_recent(self, limit: int = RECENT_DOCUMENTS_LIMIT) -> list[DocumentSummary]:
        documents = await self._document_store.find_recent(limit)
        return [DocumentSummary.from_document(d) for d in documents]

    async def get_by_id(self, document_id: str) -> Document:
        document = await self._document_store.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def delete_by_id(self, document_id: str) -> int:
        """Delete the document and its index entries; returns removed entry count."""
        deleted = await self._document_store.delete_by_id(document_id)
        if deleted is None:
            raise DocumentNotFoundError(document_id)
        return await self._indexing_engine.remove_by_document(document_id)

    async def search_by_filename(self, query: str) -> list[DocumentSummary]:
        documents = await self._document_store.search_by_filename(query)
        return [DocumentSummary.from_document(d) for d in documents]

    async def search_by_key(
        self, key: str, exact: bool = False, limit: int = 100
    ) -> ExactSearchResult | PartialSearchResult:
        if exact:
            return await self._indexing_engine.search_exact(key, limit)
        return await self._indexing_engine.search_partial(key, limit)

    async def lookup_entries(
        self, term: str, by_value: bool = False, limit: int = DEFAULT_LOOKUP_LIMIT
    ) -> list[IndexEntry]:
        """Raw index entries whose key (or, with *by_value*, string value) contains *term*."""
        if by_value:
            return await self._indexing_engine.search_by_value(term, limit)
        return await self._indexing_engine.search_by_key_term(term, limit)

    async def key_statistics(self, limit: int = 50) -> list[KeyStatistic]:
        return await self._indexing_engine.key_statistics(limit)

    async def document_stats(self) -> DocumentStats:
        since = datetime.now(tz=timezone.utc) - RECENT_WINDOW  # noqa: UP017
        return DocumentStats(
            total_documents=await self._document_store.count(),
            recent_documents=await self._document_store.count(since=since),
        )
