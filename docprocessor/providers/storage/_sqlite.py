"""Connection helper shared by the SQLite stores."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
import structlog

from docprocessor.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)


@asynccontextmanager
async def connect(db_path: Path, store: str) -> AsyncIterator[aiosqlite.Connection]:
    """Open *db_path* for one unit of work.

    Any ``aiosqlite.Error`` raised while connecting or inside the block is
    re-raised as :class:`StorageError` naming the *store*.
    """
    try:
        async with aiosqlite.connect(str(db_path)) as db:
            yield db
    except aiosqlite.Error as exc:
        logger.error("sqlite_operation_failed", store=store, path=str(db_path), error=str(exc))
        raise StorageError(f"{store} store operation failed: {exc}", provider_name="sqlite") from exc
