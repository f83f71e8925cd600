"""Filesystem-backed storage backend."""

from __future__ import annotations

import logging
import os
import posixpath
import shutil
import stat as stat_module
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from ...core.paths import split_path
from .base import FileHandle, FileInfo, FileSystem

logger = logging.getLogger(__name__)

# Owner rwx, group/other r-x
DIR_MODE = 0o755


class OSFileOps:
    """Thin wrappers over the platform file calls used by the local backend."""

    def open(self, name: str) -> BinaryIO:
        try:
            return open(name, "r+b")
        except PermissionError:
            logger.debug(f"'{name}' is not writable; opening read-only")
            return open(name, "rb")

    def create(self, name: str) -> BinaryIO:
        return open(name, "w+b")

    def stat(self, name: str) -> os.stat_result:
        return os.stat(name)

    def copy(self, dst: BinaryIO, src: BinaryIO) -> int:
        start = dst.tell()
        shutil.copyfileobj(src, dst)
        dst.flush()
        return dst.tell() - start

    def makedirs(self, path: str, mode: int) -> None:
        os.makedirs(path, mode=mode, exist_ok=True)


class LocalFile(FileHandle):
    """Handle over a live file object on the local disk."""

    def __init__(self, fileobj: BinaryIO, name: str) -> None:
        self._file = fileobj
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._file.closed

    def read(self, size: int = -1) -> bytes:
        return self._file.read(size)

    def write(self, data: bytes) -> int:
        written = self._file.write(data)
        self._file.flush()
        return written

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        return self._file.tell()

    def stat(self) -> FileInfo:
        result = os.fstat(self._file.fileno())
        return FileInfo(
            name=self._name,
            size=result.st_size,
            is_dir=stat_module.S_ISDIR(result.st_mode),
            mode=stat_module.S_IMODE(result.st_mode),
            mod_time=datetime.fromtimestamp(result.st_mtime, tz=timezone.utc),
            key=self._name,
        )

    def close(self) -> None:
        self._file.close()


class LocalFileSystem(FileSystem):
    """Store files on the local disk, relative to the working directory."""

    def __init__(self, ops: Optional[OSFileOps] = None) -> None:
        self._ops = ops or OSFileOps()

    @staticmethod
    def _container_path(container: str) -> str:
        if os.path.isabs(container) or container == os.curdir:
            return container
        return posixpath.join(os.curdir, container)

    def put(self, source: BinaryIO, path: str) -> FileHandle:
        container, base_name = split_path(path)
        target = base_name if container == "." else posixpath.join(container, base_name)

        self._ops.makedirs(self._container_path(container), DIR_MODE)
        fileobj = self._ops.create(target)
        try:
            copied = self._ops.copy(fileobj, source)
        except Exception:
            logger.warning(f"Failed to copy content into '{target}'")
            fileobj.close()
            raise
        logger.debug(f"Wrote {copied} bytes to '{target}'")
        return LocalFile(fileobj, target)

    def get(self, path: str) -> FileHandle:
        return LocalFile(self._ops.open(path), path)


__all__ = ["DIR_MODE", "LocalFile", "LocalFileSystem", "OSFileOps"]
