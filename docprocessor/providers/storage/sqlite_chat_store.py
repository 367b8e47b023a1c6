"""SQLite-backed chat session store.

Sessions and their messages live in two tables.  Messages are append-only
and read back in insertion order; a session row is upserted on every
append so ``updated_at`` tracks the latest exchange.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog

from docprocessor.interfaces.chat_store import IChatSessionStore
from docprocessor.models.chat import ChatMessage, ChatSession, MessageMetadata
from docprocessor.providers.storage._serialization import from_timestamp, to_timestamp
from docprocessor.providers.storage._sqlite import connect

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLES_SQL = [
    """\
CREATE TABLE IF NOT EXISTS chat_sessions (
    session_id  TEXT PRIMARY KEY,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS chat_messages (
    seq         INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id  TEXT NOT NULL,
    message_id  TEXT NOT NULL,
    role        TEXT NOT NULL,
    content     TEXT NOT NULL,
    timestamp   TEXT NOT NULL,
    metadata    TEXT
);
""",
]

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_chat_messages_session ON chat_messages(session_id, seq);",
]

_UPSERT_SESSION_SQL = """\
INSERT INTO chat_sessions (session_id, created_at, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(session_id)
DO UPDATE SET updated_at = excluded.updated_at;
"""

_INSERT_MESSAGE_SQL = """\
INSERT INTO chat_messages (session_id, message_id, role, content, timestamp, metadata)
VALUES (?, ?, ?, ?, ?, ?);
"""

_SELECT_SESSION_SQL = (
    "SELECT session_id, created_at, updated_at FROM chat_sessions WHERE session_id = ?;"
)

_SELECT_MESSAGES_SQL = """\
SELECT message_id, role, content, timestamp, metadata
FROM chat_messages
WHERE session_id = ?
ORDER BY seq ASC;
"""


class SQLiteChatSessionStore(IChatSessionStore):
    """Chat transcript persistence on a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with connect(self._db_path, "chat") as db:
            for table_sql in _CREATE_TABLES_SQL:
                await db.execute(table_sql)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("chat_db_initialized", path=str(self._db_path))

    async def upsert_append_messages(
        self, session_id: str, messages: list[ChatMessage]
    ) -> ChatSession:
        now = to_timestamp(datetime.now(tz=timezone.utc))  # noqa: UP017
        rows = [
            (
                session_id,
                m.id,
                m.role.value,
                m.content,
                to_timestamp(m.timestamp),
                m.metadata.model_dump_json() if m.metadata else None,
            )
            for m in messages
        ]
        async with connect(self._db_path, "chat") as db:
            await db.execute(_UPSERT_SESSION_SQL, (session_id, now, now))
            await db.executemany(_INSERT_MESSAGE_SQL, rows)
            await db.commit()
        logger.debug("chat_messages_appended", session_id=session_id, count=len(rows))

        session = await self.find_by_session_id(session_id)
        if session is None:  # pragma: no cover - row was just written
            return ChatSession(session_id=session_id, messages=list(messages))
        return session

    async def find_by_session_id(self, session_id: str) -> ChatSession | None:
        async with connect(self._db_path, "chat") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_SESSION_SQL, (session_id,))
            session_row = await cursor.fetchone()
            if session_row is None:
                return None
            cursor = await db.execute(_SELECT_MESSAGES_SQL, (session_id,))
            message_rows = await cursor.fetchall()

        messages = [
            ChatMessage(
                id=r["message_id"],
                role=r["role"],
                content=r["content"],
                timestamp=from_timestamp(r["timestamp"]),
                metadata=(
                    MessageMetadata.model_validate_json(r["metadata"]) if r["metadata"] else None
                ),
            )
            for r in message_rows
        ]
        return ChatSession(
            session_id=session_row["session_id"],
            messages=messages,
            created_at=from_timestamp(session_row["created_at"]),
            updated_at=from_timestamp(session_row["updated_at"]),
        )

    async def delete_by_session_id(self, session_id: str) -> bool:
        async with connect(self._db_path, "chat") as db:
            await db.execute("DELETE FROM chat_messages WHERE session_id = ?;", (session_id,))
            cursor = await db.execute(
                "DELETE FROM chat_sessions WHERE session_id = ?;", (session_id,)
            )
            await db.commit()
            removed = cursor.rowcount > 0
        logger.info("chat_session_deleted", session_id=session_id, removed=removed)
        return removed
