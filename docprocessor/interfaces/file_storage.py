"""Abstract base class for temporary upload storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path


# Concrete implementation: LocalFileStorage (docprocessor/providers/storage/)
class IFileStorage(ABC):
    """Blob storage for uploaded files whose lifetime is one request."""

    @abstractmethod
    def save(self, content: bytes, original_filename: str) -> Path:
        """Write *content* under a generated name and return its path."""

    @abstractmethod
    def read(self, path: Path) -> bytes:
        """Return the bytes stored at *path*."""

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Remove *path*; a missing file is not an error."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return ``True`` if *path* is currently stored."""

    @abstractmethod
    def stored(self, content: bytes, original_filename: str) -> AbstractContextManager[Path]:
        """Save *content* for the duration of a ``with`` block, then delete it."""
