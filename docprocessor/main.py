"""Document processor FastAPI application entry point.

Composition root: builds every provider and service once, stores them on
``app.state`` and wires middleware and routes.  Configuration comes from
``.env`` / environment variables (Settings) and ``config/config.yaml``.

``build_components`` / ``initialize_components`` are also used by the CLI
to run the same pipeline without the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from docprocessor.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from docprocessor.api.routes import router as api_router
from docprocessor.config.loader import load_config
from docprocessor.config.settings import Settings
from docprocessor.interfaces.ocr_provider import IOCRProvider
from docprocessor.providers.extraction.factory import build_key_value_extractor
from docprocessor.providers.ocr.google_vision_provider import GoogleVisionOCRProvider
from docprocessor.providers.ocr.tesseract_provider import TesseractOCRProvider
from docprocessor.providers.storage.local_file_storage import LocalFileStorage
from docprocessor.providers.storage.sqlite_chat_store import SQLiteChatSessionStore
from docprocessor.providers.storage.sqlite_document_store import SQLiteDocumentStore
from docprocessor.providers.storage.sqlite_index_store import SQLiteKeyValueIndexStore
from docprocessor.services.chat_orchestrator import ChatQueryOrchestrator
from docprocessor.services.chat_service import ChatService
from docprocessor.services.document_service import DocumentService
from docprocessor.services.indexing_engine import IndexingEngine
from docprocessor.services.kv_gateway import KeyValueExtractionGateway
from docprocessor.services.ocr_service import OCRService
from docprocessor.services.text_extraction import TextExtractionPipeline
from docprocessor.utils.image_preprocessor import ImagePreprocessor
from docprocessor.utils.logging import configure_logging, get_logger

_APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=settings.is_production,
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(
    app_settings: Settings,
    config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance.

    Returns a flat dict of named components to be stored on ``app.state``.
    Stores still need :func:`initialize_components` before first use.
    """
    config = config if config is not None else load_config(settings=app_settings)
    pdf_cfg = config.get("pdf", {})
    ocr_cfg = config.get("ocr", {})
    chat_cfg = config.get("chat", {})
    extraction_cfg = config.get("extraction", {})

    # -- OCR providers (ordered by priority) --
    preprocessor = ImagePreprocessor(target_height=ocr_cfg.get("target_height", 1200))
    ocr_providers: list[IOCRProvider] = [
        GoogleVisionOCRProvider(settings=app_settings),
        TesseractOCRProvider(preprocessor=preprocessor, language=ocr_cfg.get("language", "eng")),
    ]
    ocr_service = OCRService(providers=ocr_providers)
    pipeline = TextExtractionPipeline(
        ocr_service=ocr_service,
        pdf_ocr_enabled=app_settings.pdf_ocr_enabled,
        render_dpi=pdf_cfg.get("render_dpi", 200),
        min_text_length=pdf_cfg.get("min_text_length", 20),
        min_alnum_ratio=pdf_cfg.get("min_alnum_ratio", 0.3),
    )

    # -- Key-value backend (fixed for the process lifetime) --
    gateway = KeyValueExtractionGateway(build_key_value_extractor(app_settings))

    # -- Persistence --
    document_store = SQLiteDocumentStore(db_path=app_settings.database_path)
    index_store = SQLiteKeyValueIndexStore(db_path=app_settings.database_path)
    chat_store = SQLiteChatSessionStore(db_path=app_settings.database_path)
    file_storage = LocalFileStorage(upload_dir=app_settings.upload_dir)

    # -- Services --
    indexing_engine = IndexingEngine(store=index_store)
    document_service = DocumentService(
        file_storage=file_storage,
        pipeline=pipeline,
        gateway=gateway,
        document_store=document_store,
        indexing_engine=indexing_engine,
        confidence=extraction_cfg.get("confidence", 0.85),
    )
    orchestrator = ChatQueryOrchestrator(
        document_store=document_store,
        gateway=gateway,
        context_documents=chat_cfg.get("context_documents", 20),
        text_truncate_chars=chat_cfg.get("text_truncate_chars", 1000),
    )
    chat_service = ChatService(orchestrator=orchestrator, chat_store=chat_store)

    return {
        "settings": app_settings,
        "config": config,
        "ocr_service": ocr_service,
        "document_store": document_store,
        "index_store": index_store,
        "chat_store": chat_store,
        "indexing_engine": indexing_engine,
        "document_service": document_service,
        "chat_service": chat_service,
        "ai_provider": gateway.provider_name,
    }


async def initialize_components(components: dict[str, Any]) -> None:
    """Create database tables for every store in *components*."""
    for name in ("document_store", "index_store", "chat_store"):
        await components[name].initialize()


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        components = build_components(app_settings)
        for key, value in components.items():
            setattr(application.state, key, value)
        await initialize_components(components)

        _logger.info(
            "app_startup",
            version=_APP_VERSION,
            environment=app_settings.app_env,
            ai_provider=components["ai_provider"],
            ocr_providers=components["ocr_service"].get_available_providers(),
            pdf_ocr_enabled=app_settings.pdf_ocr_enabled,
        )
        yield
        _logger.info("app_shutdown")

    application = FastAPI(
        title="Document AI Processor",
        version=_APP_VERSION,
        description=(
            "Upload PDFs or images, extract their text with native parsing or OCR, "
            "turn it into key-value pairs, and search or chat over the results."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "docprocessor.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
