"""SQLite-backed document store.

One row per processed upload.  Key-value pairs and the metadata block are
stored as JSON text; ids are random hex tokens assigned on insert.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path

import aiosqlite
import structlog

from docprocessor.interfaces.document_store import IDocumentStore
from docprocessor.models.document import Document, DocumentMetadata, KeyValuePair
from docprocessor.providers.storage._serialization import (
    from_json,
    from_timestamp,
    to_json,
    to_timestamp,
)
from docprocessor.providers.storage._sqlite import connect

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id                 TEXT PRIMARY KEY,
    filename           TEXT NOT NULL,
    original_filename  TEXT NOT NULL,
    key_value_pairs    TEXT NOT NULL DEFAULT '[]',
    confidence         REAL NOT NULL DEFAULT 0,
    extracted_text     TEXT NOT NULL DEFAULT '',
    processing_method  TEXT NOT NULL,
    metadata           TEXT NOT NULL DEFAULT '{}',
    created_at         TEXT NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);",
]

_COLUMNS = (
    "id, filename, original_filename, key_value_pairs, confidence, "
    "extracted_text, processing_method, metadata, created_at"
)

_INSERT_SQL = f"INSERT INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);"

_SELECT_BY_ID_SQL = f"SELECT {_COLUMNS} FROM documents WHERE id = ?;"

_SELECT_RECENT_SQL = (
    f"SELECT {_COLUMNS} FROM documents ORDER BY created_at DESC, rowid DESC LIMIT ?;"
)

_SEARCH_FILENAME_SQL = f"""\
SELECT {_COLUMNS} FROM documents
WHERE instr(lower(filename), lower(?)) > 0
   OR instr(lower(original_filename), lower(?)) > 0
ORDER BY created_at DESC, rowid DESC;
"""

_DELETE_SQL = "DELETE FROM documents WHERE id = ?;"


class SQLiteDocumentStore(IDocumentStore):
    """Document persistence on a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with connect(self._db_path, "document") as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("document_db_initialized", path=str(self._db_path))

    async def insert(self, document: Document) -> str:
        document_id = uuid.uuid4().hex
        async with connect(self._db_path, "document") as db:
            await db.execute(
                _INSERT_SQL,
                (
                    document_id,
                    document.filename,
                    document.original_filename,
                    to_json([pair.model_dump() for pair in document.key_value_pairs]),
                    document.confidence,
                    document.extracted_text,
                    document.processing_method.value,
                    document.metadata.model_dump_json(),
                    to_timestamp(document.created_at),
                ),
            )
            await db.commit()
        logger.info(
            "document_inserted",
            document_id=document_id,
            original_filename=document.original_filename,
        )
        return document_id

    async def find_by_id(self, document_id: str) -> Document | None:
        async with connect(self._db_path, "document") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_BY_ID_SQL, (document_id,))
            row = await cursor.fetchone()
        return _row_to_document(row) if row else None

    async def find_recent(self, limit: int = 50) -> list[Document]:
        async with connect(self._db_path, "document") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_RECENT_SQL, (limit,))
            rows = await cursor.fetchall()
        return [_row_to_document(r) for r in rows]

    async def delete_by_id(self, document_id: str) -> Document | None:
        async with connect(self._db_path, "document") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_BY_ID_SQL, (document_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            await db.execute(_DELETE_SQL, (document_id,))
            await db.commit()
        logger.info("document_deleted", document_id=document_id)
        return _row_to_document(row)

    async def search_by_filename(self, pattern: str) -> list[Document]:
        async with connect(self._db_path, "document") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SEARCH_FILENAME_SQL, (pattern, pattern))
            rows = await cursor.fetchall()
        return [_row_to_document(r) for r in rows]

    async def count(self, since: datetime | None = None) -> int:
        async with connect(self._db_path, "document") as db:
            if since is None:
                cursor = await db.execute("SELECT COUNT(*) FROM documents;")
            else:
                cursor = await db.execute(
                    "SELECT COUNT(*) FROM documents WHERE created_at >= ?;",
                    (to_timestamp(since),),
                )
            row = await cursor.fetchone()
        return int(row[0]) if row else 0


def _row_to_document(row: aiosqlite.Row) -> Document:
    r = dict(row)
    return Document(
        id=r["id"],
        filename=r["filename"],
        original_filename=r["original_filename"],
        key_value_pairs=[KeyValuePair(**p) for p in from_json(r["key_value_pairs"]) or []],
        confidence=r["confidence"],
        extracted_text=r["extracted_text"],
        processing_method=r["processing_method"],
        metadata=DocumentMetadata.model_validate_json(r["metadata"]),
        created_at=from_timestamp(r["created_at"]),
    )
