"""SQLite-backed key-value index.

Each row is one denormalized ``(document, key, value)`` fact.  Values are
stored as JSON text next to their ``value_type`` discriminant; dates are
written as ISO strings and turned back into ``datetime``/``date`` on read.

Substring matches use ``instr`` rather than ``LIKE`` because normalized keys
contain underscores, which ``LIKE`` treats as a wildcard.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from docprocessor.interfaces.index_store import IKeyValueIndexStore
from docprocessor.models.index import IndexEntry, KeyStatistic, ValueType
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
CREATE TABLE IF NOT EXISTS key_value_index (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id        TEXT NOT NULL,
    filename           TEXT NOT NULL,
    original_filename  TEXT NOT NULL,
    key                TEXT NOT NULL,
    key_normalized     TEXT NOT NULL,
    value              TEXT,
    value_type         TEXT NOT NULL DEFAULT 'string',
    extracted_at       TEXT NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_kvi_document ON key_value_index(document_id);",
    "CREATE INDEX IF NOT EXISTS idx_kvi_key ON key_value_index(key);",
    "CREATE INDEX IF NOT EXISTS idx_kvi_key_normalized ON key_value_index(key_normalized);",
    "CREATE INDEX IF NOT EXISTS idx_kvi_extracted ON key_value_index(extracted_at);",
]

_COLUMNS = (
    "id, document_id, filename, original_filename, key, key_normalized, "
    "value, value_type, extracted_at"
)

_INSERT_SQL = """\
INSERT INTO key_value_index
    (document_id, filename, original_filename, key, key_normalized,
     value, value_type, extracted_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?);
"""

_NEWEST_FIRST = "ORDER BY extracted_at DESC, id ASC LIMIT ?"

_SELECT_BY_KEY_SQL = f"SELECT {_COLUMNS} FROM key_value_index WHERE key = ? {_NEWEST_FIRST};"

_SELECT_BY_NORMALIZED_SQL = (
    f"SELECT {_COLUMNS} FROM key_value_index "
    f"WHERE instr(key_normalized, lower(?)) > 0 {_NEWEST_FIRST};"
)

_SELECT_BY_KEY_TERM_SQL = (
    f"SELECT {_COLUMNS} FROM key_value_index "
    "WHERE instr(lower(key), lower(?)) > 0 OR instr(key_normalized, lower(?)) > 0 "
    f"{_NEWEST_FIRST};"
)

_SELECT_BY_VALUE_SQL = (
    f"SELECT {_COLUMNS} FROM key_value_index "
    "WHERE value_type = 'string' "
    "AND instr(lower(json_extract(value, '$')), lower(?)) > 0 "
    f"{_NEWEST_FIRST};"
)

_KEY_STATISTICS_SQL = """\
SELECT key,
       COUNT(*)              AS count,
       COUNT(DISTINCT value) AS unique_value_count,
       MAX(extracted_at)     AS last_seen
FROM key_value_index
GROUP BY key
ORDER BY count DESC, key ASC
LIMIT ?;
"""

_DELETE_BY_DOCUMENT_SQL = "DELETE FROM key_value_index WHERE document_id = ?;"


class SQLiteKeyValueIndexStore(IKeyValueIndexStore):
    """Key-value index rows on a local SQLite file.

    Shares the database file with :class:`SQLiteDocumentStore` by default
    but owns its own table; there is no foreign key, cascades are driven by
    the indexing engine.
    """

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the index table and its lookup indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with connect(self._db_path, "index") as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("index_db_initialized", path=str(self._db_path))

    async def insert_many(self, entries: list[IndexEntry]) -> int:
        if not entries:
            return 0
        rows = [
            (
                e.document_id,
                e.filename,
                e.original_filename,
                e.key,
                e.key_normalized,
                to_json(e.value),
                e.value_type.value,
                to_timestamp(e.extracted_at),
            )
            for e in entries
        ]
        async with connect(self._db_path, "index") as db:
            await db.executemany(_INSERT_SQL, rows)
            await db.commit()
        return len(rows)

    async def delete_by_document(self, document_id: str) -> int:
        async with connect(self._db_path, "index") as db:
            cursor = await db.execute(_DELETE_BY_DOCUMENT_SQL, (document_id,))
            await db.commit()
            deleted = cursor.rowcount
        return max(deleted, 0)

    async def find_by_key(self, key: str, limit: int) -> list[IndexEntry]:
        return await self._select(_SELECT_BY_KEY_SQL, (key, limit))

    async def find_by_normalized_fragment(self, fragment: str, limit: int) -> list[IndexEntry]:
        return await self._select(_SELECT_BY_NORMALIZED_SQL, (fragment, limit))

    async def find_by_key_term(
        self, term: str, normalized_term: str, limit: int
    ) -> list[IndexEntry]:
        return await self._select(_SELECT_BY_KEY_TERM_SQL, (term, normalized_term, limit))

    async def find_by_value_fragment(self, term: str, limit: int) -> list[IndexEntry]:
        return await self._select(_SELECT_BY_VALUE_SQL, (term, limit))

    async def key_statistics(self, limit: int) -> list[KeyStatistic]:
        async with connect(self._db_path, "index") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_KEY_STATISTICS_SQL, (limit,))
            rows = await cursor.fetchall()
        return [
            KeyStatistic(
                key=r["key"],
                count=r["count"],
                unique_value_count=r["unique_value_count"],
                last_seen=from_timestamp(r["last_seen"]),
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _select(self, sql: str, params: tuple[Any, ...]) -> list[IndexEntry]:
        async with connect(self._db_path, "index") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
        return [_row_to_entry(r) for r in rows]


def _row_to_entry(row: aiosqlite.Row) -> IndexEntry:
    r = dict(row)
    value_type = ValueType(r["value_type"])
    value = from_json(r["value"])
    if value_type is ValueType.DATE and isinstance(value, str):
        value = _parse_date(value)
    return IndexEntry(
        id=r["id"],
        document_id=r["document_id"],
        filename=r["filename"],
        original_filename=r["original_filename"],
        key=r["key"],
        key_normalized=r["key_normalized"],
        value=value,
        value_type=value_type,
        extracted_at=from_timestamp(r["extracted_at"]),
    )


def _parse_date(raw: str) -> date | datetime:
    # date.isoformat() is exactly 10 characters; anything longer carries a time.
    if len(raw) == 10:
        return date.fromisoformat(raw)
    return datetime.fromisoformat(raw)
