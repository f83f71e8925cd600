"""S3 storage backend implementation.

The backend exposes the same two calls as the local disk, ``put`` and
``get``, but the object store has no incremental writes: content is buffered
in full and sent with one request. Handles returned here are in-memory
snapshots; writing to one re-uploads the whole object under its storage key.
"""

from __future__ import annotations

import io
import logging
import threading
from datetime import datetime
from typing import BinaryIO, Optional

from ...core.clock import Clock, SystemClock
from ...core.paths import content_type_for, split_path
from .base import OBJECT_MODE, FileHandle, FileInfo, FileSystem, StorageError
from .transport import Boto3Transport, CredentialProvider, TransportClient, TransportConfig

logger = logging.getLogger(__name__)


class S3File(FileHandle):
    """Snapshot of an object's content plus the backend it came from."""

    def __init__(
        self,
        content: bytes,
        url: str,
        key: str,
        mod_time: Optional[datetime],
        fs: "S3FileSystem",
    ) -> None:
        self._reader = io.BytesIO(content)
        self._info = FileInfo(
            name=url,
            size=len(content),
            is_dir=False,
            mode=OBJECT_MODE,
            mod_time=mod_time,
            key=key,
        )
        self._fs = fs

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def closed(self) -> bool:
        return self._reader.closed

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._reader.seek(offset, whence)

    def tell(self) -> int:
        return self._reader.tell()

    def stat(self) -> FileInfo:
        return self._info

    def write(self, data: bytes) -> int:
        """Replace the stored object with ``data``.

        The upload targets the key recorded at ``put``/``get`` time. On success
        this handle adopts the new content and metadata, positioned after the
        written bytes.
        """

        if self.closed:
            raise ValueError("I/O operation on closed file")
        payload = bytes(data)
        replaced = self._fs._store(payload, self._info.key)
        self._reader = replaced._reader
        self._info = replaced._info
        self._reader.seek(0, io.SEEK_END)
        return len(payload)

    def close(self) -> None:
        self._reader.close()


class S3FileSystem(FileSystem):
    """Store objects in a single S3 bucket."""

    def __init__(
        self,
        region: str,
        bucket: str,
        credential_provider: Optional[CredentialProvider] = None,
        *,
        transport: Optional[TransportClient] = None,
        clock: Optional[Clock] = None,
        endpoint_url: Optional[str] = None,
        host_prefix: str = "s3",
        domain: str = "amazonaws.com",
    ) -> None:
        if not region:
            raise StorageError("S3 region is not configured")
        if not bucket:
            raise StorageError("S3 bucket is not configured")

        self.region = region
        self.bucket = bucket
        self._config = TransportConfig(
            region=region,
            credentials=credential_provider,
            endpoint_url=endpoint_url,
        )
        self._transport = transport or Boto3Transport()
        self._clock = clock or SystemClock()
        self._host_prefix = host_prefix
        self._domain = domain
        self._service: Optional[TransportClient] = None
        self._lock = threading.Lock()

    def _svc(self) -> TransportClient:
        with self._lock:
            if self._service is None:
                self._service = self._transport.new_service(self._config)
            return self._service

    def file_url(self, key: str) -> str:
        """Return the public URL of the object stored at ``key``."""

        return f"https://{self._host_prefix}-{self.region}.{self._domain}/{self.bucket}/{key}"

    def put(self, source: BinaryIO, path: str) -> FileHandle:
        container, base_name = split_path(path)
        key = base_name if container == "." else f"{container}/{base_name}"

        # The object store needs the full length up front
        return self._store(source.read(), key)

    def _store(self, content: bytes, key: str) -> "S3File":
        """Upload ``content`` under ``key`` exactly as given."""

        content_type = content_type_for(key)
        svc = self._svc()
        logger.debug(f"Uploading {len(content)} bytes to s3://{self.bucket}/{key}")
        try:
            svc.put_object(
                bucket=self.bucket,
                key=key,
                body=content,
                content_length=len(content),
                content_type=content_type,
            )
        except StorageError as exc:
            logger.warning(f"Upload of '{key}' to bucket '{self.bucket}' failed: {exc}")
            raise

        return S3File(content, self.file_url(key), key, self._clock.now(), self)

    def get(self, path: str) -> FileHandle:
        svc = self._svc()
        logger.debug(f"Downloading s3://{self.bucket}/{path}")
        try:
            remote = svc.get_object(bucket=self.bucket, key=path)
        except StorageError as exc:
            logger.warning(f"Download of '{path}' from bucket '{self.bucket}' failed: {exc}")
            raise

        try:
            content = remote.body.read()
        finally:
            remote.body.close()
        return S3File(content, self.file_url(path), path, remote.last_modified, self)


__all__ = ["S3File", "S3FileSystem"]
