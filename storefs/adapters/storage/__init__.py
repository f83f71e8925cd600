"""Storage backend abstractions."""

from .base import (
    FileHandle,
    FileInfo,
    FileSystem,
    ObjectNotFoundError,
    PathFormatError,
    StorageError,
    TransportError,
)
from .local import LocalFile, LocalFileSystem, OSFileOps
from .s3 import S3File, S3FileSystem
from .transport import (
    Boto3Transport,
    CredentialProvider,
    Credentials,
    EnvCredentialProvider,
    RemoteObject,
    TransportClient,
    TransportConfig,
)

__all__ = [
    "Boto3Transport",
    "CredentialProvider",
    "Credentials",
    "EnvCredentialProvider",
    "FileHandle",
    "FileInfo",
    "FileSystem",
    "LocalFile",
    "LocalFileSystem",
    "OSFileOps",
    "ObjectNotFoundError",
    "PathFormatError",
    "RemoteObject",
    "S3File",
    "S3FileSystem",
    "StorageError",
    "TransportClient",
    "TransportConfig",
    "TransportError",
]
