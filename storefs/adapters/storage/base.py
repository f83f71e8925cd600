"""Base storage backend definitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional

from ...core.paths import PathFormatError

# Permission bits reported for objects that carry no real ACL information
OBJECT_MODE = 0o777


@dataclass(frozen=True)
class FileInfo:
    """Represents a stored file's metadata."""

    name: str
    size: int
    is_dir: bool = False
    mode: int = OBJECT_MODE
    mod_time: Optional[datetime] = None
    key: Optional[str] = None

    def sys(self) -> None:
        return None


class StorageError(RuntimeError):
    """Raised when storage operations fail."""


class TransportError(StorageError):
    """Raised when a request to the remote object store fails."""


class ObjectNotFoundError(TransportError):
    """Raised when the remote object store has no object at the requested key."""


class FileHandle:
    """Abstract file returned by :class:`FileSystem` operations."""

    @property
    def name(self) -> str:
        raise NotImplementedError

    @property
    def closed(self) -> bool:
        raise NotImplementedError

    def read(self, size: int = -1) -> bytes:
        raise NotImplementedError

    def write(self, data: bytes) -> int:
        raise NotImplementedError

    def seek(self, offset: int, whence: int = 0) -> int:
        raise NotImplementedError

    def tell(self) -> int:
        raise NotImplementedError

    def stat(self) -> FileInfo:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "FileHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FileSystem:
    """Abstract interface for storage backends."""

    def put(self, source: BinaryIO, path: str) -> FileHandle:
        """Store the remaining content of ``source`` at ``path``."""

        raise NotImplementedError

    def get(self, path: str) -> FileHandle:
        """Return a handle positioned at the start of the content at ``path``."""

        raise NotImplementedError


__all__ = [
    "FileHandle",
    "FileInfo",
    "FileSystem",
    "OBJECT_MODE",
    "ObjectNotFoundError",
    "PathFormatError",
    "StorageError",
    "TransportError",
]
