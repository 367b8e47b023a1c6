"""FastAPI routes for the document processor.

Service dependencies are resolved from ``app.state`` via ``Depends`` using
the ``Annotated`` pattern; ``app.state`` is populated by the lifespan in
main.py.

# Endpoint                                Method  Description
# ───────────────────────────────────────────────────────────────────────
# /api/v1/process-document                POST    Upload → text → pairs → store → index
# /api/v1/documents                       GET     Recent documents (reduced projection)
# /api/v1/documents/stats                 GET     Total / last-7-days document counts
# /api/v1/documents/{id}                  GET     Full document
# /api/v1/documents/{id}                  DELETE  Delete document and its index entries
# /api/v1/search?q=                       GET     Filename substring search
# /api/v1/search/key/{key}?exact=&limit=  GET     Exact or partial key search
# /api/v1/keys/stats                      GET     Key usage statistics
# /api/v1/chat/query                      POST    Ask a question over recent documents
# /api/v1/chat/history/{session_id}       GET     Session transcript
# /api/v1/chat/history/{session_id}       DELETE  Clear a session
# /api/v1/health                          GET     Liveness + selected AI provider
"""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from docprocessor.api.schemas import (
    ChatHistoryResponse,
    ChatQueryRequest,
    ChatQueryResponse,
    DeleteDocumentResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentStatsResponse,
    DocumentSummaryResponse,
    ExactKeySearchResponse,
    FilenameSearchResponse,
    HealthResponse,
    KeyStatisticResponse,
    KeyStatisticsResponse,
    MessageResponse,
    PartialKeySearchResponse,
    ProcessDocumentResponse,
    ProcessingErrorDetails,
    ProcessingErrorResponse,
)
from docprocessor.config.settings import Settings
from docprocessor.models.document import MediaType, UploadedFile
from docprocessor.models.index import ExactSearchResult
from docprocessor.services.chat_service import ChatService
from docprocessor.services.document_service import DocumentService
from docprocessor.utils.errors import (
    DocumentNotFoundError,
    DocumentProcessorError,
    ExtractionError,
    ExtractionErrorKind,
    LLMError,
    MalformedModelOutputError,
    NoTextContentError,
    ProcessingStep,
    StorageError,
    UnsupportedTypeError,
)
from docprocessor.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_ALLOWED_CONTENT_TYPES = frozenset(m.value for m in MediaType)
_UPLOAD_CHUNK_SIZE = 64 * 1024

_GENERIC_PROCESSING_ERROR = "Failed to process document. Please try again."

# Extraction failures whose message is written for the end user.
_USER_FACING_KINDS = frozenset(
    {
        ExtractionErrorKind.UNSUPPORTED_TYPE,
        ExtractionErrorKind.INVALID_FORMAT,
        ExtractionErrorKind.SCANNED_PDF_UNSUPPORTED,
    }
)


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def _get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


DocumentServiceDep = Annotated[DocumentService, Depends(_get_document_service)]
ChatServiceDep = Annotated[ChatService, Depends(_get_chat_service)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


# ---------------------------------------------------------------------------
# Processing error shaping
# ---------------------------------------------------------------------------


def _status_for(exc: Exception) -> int:
    if isinstance(exc, UnsupportedTypeError):
        return 415
    if isinstance(exc, NoTextContentError):
        return 400
    if isinstance(exc, ExtractionError):
        return 422
    return 500


def _processing_step_of(exc: Exception) -> ProcessingStep:
    if isinstance(exc, ExtractionError):
        return exc.processing_step
    if isinstance(exc, LLMError):
        return ProcessingStep.KEY_VALUE_EXTRACTION
    if isinstance(exc, StorageError):
        return ProcessingStep.PERSISTENCE
    return ProcessingStep.UNKNOWN


def _processing_error_response(
    exc: Exception,
    settings: Settings,
    *,
    filename: str,
    mime_type: str,
    file_size: int,
    status_code: int | None = None,
) -> JSONResponse:
    """Build the ``{error, keyValuePairs: []}`` body, with details outside production."""
    kind = exc.kind if isinstance(exc, DocumentProcessorError) else None
    if isinstance(exc, NoTextContentError) or kind in _USER_FACING_KINDS:
        message = exc.message  # type: ignore[union-attr]
    else:
        message = _GENERIC_PROCESSING_ERROR

    body = ProcessingErrorResponse(error=message, kind=kind.value if kind else None)
    if not settings.is_production:
        body.details = ProcessingErrorDetails(
            message=getattr(exc, "message", str(exc)),
            stack="".join(traceback.format_exception(exc)),
            filename=filename,
            mime_type=mime_type,
            file_size=file_size,
            timestamp=datetime.now(tz=timezone.utc),  # noqa: UP017
            processing_step=_processing_step_of(exc).value,
            raw_output=exc.raw_snippet if isinstance(exc, MalformedModelOutputError) else None,
        )
    return JSONResponse(
        status_code=status_code or _status_for(exc),
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


# ---------------------------------------------------------------------------
# Document endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/process-document",
    response_model=ProcessDocumentResponse,
    responses={
        400: {"model": ProcessingErrorResponse},
        413: {"model": ProcessingErrorResponse},
        415: {"model": ProcessingErrorResponse},
        422: {"model": ProcessingErrorResponse},
        500: {"model": ProcessingErrorResponse},
    },
    summary="Upload a PDF or image and extract its key-value pairs",
)
async def process_document(
    document: UploadFile,
    service: DocumentServiceDep,
    settings: SettingsDep,
) -> Any:
    filename = document.filename or "unknown"
    content_type = (document.content_type or "").lower()
    error_context = {"filename": filename, "mime_type": content_type or "unknown"}

    if content_type not in _ALLOWED_CONTENT_TYPES:
        exc = UnsupportedTypeError(
            "Invalid file type. Only PDF, JPEG, JPG, and PNG files are allowed."
        )
        return _processing_error_response(exc, settings, file_size=0, **error_context)

    # Read in chunks so oversized uploads are rejected early.
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await document.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > settings.max_upload_bytes:
            exc = ExtractionError(
                f"File too large. Maximum: {settings.max_upload_bytes // (1024 * 1024)} MB.",
                processing_step=ProcessingStep.FILE_TYPE_CHECK,
            )
            return _processing_error_response(
                exc, settings, file_size=total_size, status_code=413, **error_context
            )
        chunks.append(chunk)
    content = b"".join(chunks)

    upload = UploadedFile(original_filename=filename, mime_type=content_type, content=content)
    try:
        result = await service.process(upload)
    except Exception as exc:
        _logger.error(
            "document_processing_failed",
            filename=filename,
            error_type=type(exc).__name__,
            error=str(exc),
            processing_step=_processing_step_of(exc).value,
        )
        return _processing_error_response(exc, settings, file_size=len(content), **error_context)

    return ProcessDocumentResponse.model_validate(result.model_dump(mode="json"))


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(
    service: DocumentServiceDep,
    limit: int = Query(50, ge=1, le=500),
) -> DocumentListResponse:
    summaries = await service.list_recent(limit)
    documents = [DocumentSummaryResponse.model_validate(s.model_dump(mode="json")) for s in summaries]
    return DocumentListResponse(documents=documents, count=len(documents))


@router.get("/documents/stats", response_model=DocumentStatsResponse)
async def document_stats(service: DocumentServiceDep) -> DocumentStatsResponse:
    stats = await service.document_stats()
    return DocumentStatsResponse.model_validate(stats.model_dump())


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, service: DocumentServiceDep) -> DocumentResponse:
    try:
        document = await service.get_by_id(document_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Document not found") from exc
    return DocumentResponse.model_validate(document.model_dump(mode="json"))


@router.delete("/documents/{document_id}", response_model=DeleteDocumentResponse)
async def delete_document(document_id: str, service: DocumentServiceDep) -> DeleteDocumentResponse:
    try:
        removed = await service.delete_by_id(document_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Document not found") from exc
    return DeleteDocumentResponse(document_id=document_id, removed_index_entries=removed)


# ---------------------------------------------------------------------------
# Search endpoints
# ---------------------------------------------------------------------------


@router.get("/search", response_model=FilenameSearchResponse)
async def search_by_filename(service: DocumentServiceDep, q: str = "") -> FilenameSearchResponse:
    if not q.strip():
        raise HTTPException(status_code=400, detail="Search query required")
    summaries = await service.search_by_filename(q)
    documents = [DocumentSummaryResponse.model_validate(s.model_dump(mode="json")) for s in summaries]
    return FilenameSearchResponse(documents=documents, count=len(documents), query=q)


@router.get(
    "/search/key/{key_name}",
    response_model=ExactKeySearchResponse | PartialKeySearchResponse,
)
async def search_by_key(
    key_name: str,
    service: DocumentServiceDep,
    exact: bool = False,
    limit: int = Query(100, ge=1, le=1000),
) -> ExactKeySearchResponse | PartialKeySearchResponse:
    result = await service.search_by_key(key_name, exact=exact, limit=limit)
    payload = result.model_dump(mode="json")
    if isinstance(result, ExactSearchResult):
        return ExactKeySearchResponse.model_validate(payload)
    return PartialKeySearchResponse.model_validate(payload)


@router.get("/keys/stats", response_model=KeyStatisticsResponse)
async def key_statistics(service: DocumentServiceDep) -> KeyStatisticsResponse:
    stats = await service.key_statistics()
    items = [KeyStatisticResponse.model_validate(s.model_dump(mode="json")) for s in stats]
    return KeyStatisticsResponse(key_statistics=items, total_keys=len(items))


# ---------------------------------------------------------------------------
# Chat endpoints
# ---------------------------------------------------------------------------


@router.post("/chat/query", response_model=ChatQueryResponse)
async def chat_query(body: ChatQueryRequest, service: ChatServiceDep) -> ChatQueryResponse:
    try:
        result = await service.chat_query(body.query, body.session_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ChatQueryResponse.model_validate(result.model_dump(mode="json"))


@router.get("/chat/history/{session_id}", response_model=ChatHistoryResponse)
async def chat_history(
    session_id: str,
    service: ChatServiceDep,
    limit: int = Query(50, ge=1, le=500),
) -> ChatHistoryResponse:
    history = await service.chat_history(session_id, limit)
    return ChatHistoryResponse.model_validate(history.model_dump(mode="json"))


@router.delete("/chat/history/{session_id}", response_model=MessageResponse)
async def clear_chat_history(session_id: str, service: ChatServiceDep) -> MessageResponse:
    await service.clear_chat_history(session_id)
    return MessageResponse(message="Chat history cleared successfully")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(ai_provider=request.app.state.ai_provider)
