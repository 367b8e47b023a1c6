"""Public interface definitions for all external collaborators.

Every external service or store used by the document processor is accessed
through the abstract base classes defined here.  Concrete adapters live in
``docprocessor/providers/`` and are wired together once, in
``docprocessor/main.py``.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    IOCRProvider           →  GoogleVisionOCRProvider, TesseractOCRProvider
    ILLMProvider           →  AnthropicLLMProvider, OpenAILLMProvider
    IKeyValueExtractor     →  LLMKeyValueExtractor, MockKeyValueExtractor
    IDocumentStore         →  SQLiteDocumentStore
    IKeyValueIndexStore    →  SQLiteKeyValueIndexStore
    IChatSessionStore      →  SQLiteChatSessionStore
    IFileStorage           →  LocalFileStorage
"""

from docprocessor.interfaces.chat_store import IChatSessionStore
from docprocessor.interfaces.document_store import IDocumentStore
from docprocessor.interfaces.file_storage import IFileStorage
from docprocessor.interfaces.index_store import IKeyValueIndexStore
from docprocessor.interfaces.key_value_extractor import IKeyValueExtractor
from docprocessor.interfaces.llm_provider import ILLMProvider
from docprocessor.interfaces.ocr_provider import IOCRProvider

__all__ = [
    "IChatSessionStore",
    "IDocumentStore",
    "IFileStorage",
    "IKeyValueExtractor",
    "IKeyValueIndexStore",
    "ILLMProvider",
    "IOCRProvider",
]
