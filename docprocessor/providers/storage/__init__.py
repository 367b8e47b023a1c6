"""Persistence backends: SQLite stores and local upload storage."""

from docprocessor.providers.storage.local_file_storage import LocalFileStorage
from docprocessor.providers.storage.sqlite_chat_store import SQLiteChatSessionStore
from docprocessor.providers.storage.sqlite_document_store import SQLiteDocumentStore
from docprocessor.providers.storage.sqlite_index_store import SQLiteKeyValueIndexStore

__all__ = [
    "LocalFileStorage",
    "SQLiteChatSessionStore",
    "SQLiteDocumentStore",
    "SQLiteKeyValueIndexStore",
]
