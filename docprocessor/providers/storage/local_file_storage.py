"""Local-disk storage for uploads in flight.

Uploads only live for the duration of one processing request.  Each one
is written under the upload directory with a generated name
``document-<epoch ms>-<9 random digits><ext>`` and removed by
:meth:`LocalFileStorage.stored` on every exit path.
"""

from __future__ import annotations

import contextlib
import random
import time
from collections.abc import Iterator
from pathlib import Path

import structlog

from docprocessor.interfaces.file_storage import IFileStorage

logger = structlog.get_logger(logger_name=__name__)


def generate_stored_filename(original_filename: str) -> str:
    """Return ``document-<epoch ms>-<9 digits><ext>`` keeping the upload's extension."""
    suffix = random.randint(0, 999_999_999)  # noqa: S311
    extension = Path(original_filename).suffix.lower()
    return f"document-{int(time.time() * 1000)}-{suffix:09d}{extension}"


class LocalFileStorage(IFileStorage):
    """Upload storage rooted at *upload_dir* (created on demand)."""

    def __init__(self, upload_dir: str | Path = "data/uploads") -> None:
        self._upload_dir = Path(upload_dir)

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def save(self, content: bytes, original_filename: str) -> Path:
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        path = self._upload_dir / generate_stored_filename(original_filename)
        path.write_bytes(content)
        logger.debug("upload_saved", path=str(path), size=len(content))
        return path

    def read(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def delete(self, path: Path) -> None:
        Path(path).unlink(missing_ok=True)
        logger.debug("upload_removed", path=str(path))

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    @contextlib.contextmanager
    def stored(self, content: bytes, original_filename: str) -> Iterator[Path]:
        path = self.save(content, original_filename)
        try:
            yield path
        finally:
            self.delete(path)
