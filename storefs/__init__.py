"""storefs - one put/get storage contract over local disk and S3."""

__version__ = "0.1.0"

from .adapters.storage import (
    FileHandle,
    FileInfo,
    FileSystem,
    LocalFileSystem,
    ObjectNotFoundError,
    PathFormatError,
    S3FileSystem,
    StorageError,
    TransportError,
)
from .core.paths import content_type_for, decode_data_uri, sanitize_path
from .dependencies import get_filesystem

__all__ = [
    'FileHandle',
    'FileInfo',
    'FileSystem',
    'LocalFileSystem',
    'ObjectNotFoundError',
    'PathFormatError',
    'S3FileSystem',
    'StorageError',
    'TransportError',
    'content_type_for',
    'decode_data_uri',
    'get_filesystem',
    'sanitize_path',
]
