"""Path normalization and data-URI helpers.

Everything in this module is a pure function. Patterns are compiled once at
import time and shared between calls.
"""

from __future__ import annotations

import base64
import binascii
import io
import mimetypes
import posixpath
import re
from typing import Tuple, Union

DEFAULT_CONTENT_TYPE = "text/plain"

_WHITESPACE_RE = re.compile(r"\s+")
_EXTENSION_RE = re.compile(r"\.([^./\\]+)$")
_DATA_URI_RE = re.compile(rb"data:([^;,]+);base64,")

BytesLike = Union[bytes, bytearray, str]


class PathFormatError(ValueError):
    """Raised when a path cannot be split into a container and a file name."""


class DataURIError(ValueError):
    """Raised when input does not carry a ``data:<type>;base64,`` prefix."""


def sanitize_path(path: str) -> str:
    """Trim the path and collapse whitespace runs into a single ``-``."""

    return _WHITESPACE_RE.sub("-", path.strip())


def content_type_for(path: str) -> str:
    """Resolve a MIME type from the extension of the last path segment."""

    match = _EXTENSION_RE.search(path)
    if not match:
        return DEFAULT_CONTENT_TYPE
    guessed, _ = mimetypes.guess_type(f"file.{match.group(1).lower()}")
    return guessed or DEFAULT_CONTENT_TYPE


def split_path(path: str) -> Tuple[str, str]:
    """Sanitize ``path`` and return ``(container, base_name)``.

    Bare file names live in the current directory (``"."``). The base name
    must carry an extension.
    """

    cleaned = sanitize_path(path)
    container, base_name = posixpath.split(cleaned)
    if not base_name:
        raise PathFormatError(f"path {path!r} has no file name")
    if len(posixpath.splitext(base_name)[1]) < 2:
        raise PathFormatError(f"path {path!r} has no file extension")
    return container or ".", base_name


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        try:
            return data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise DataURIError(f"data URI must be ASCII: {exc}") from exc
    return bytes(data)


def strip_base_encoding(data: BytesLike) -> bytes:
    """Remove the ``data:<type>;base64,`` prefix, leaving the payload."""

    return _DATA_URI_RE.sub(b"", _as_bytes(data))


def data_uri_type(data: BytesLike) -> str:
    """Return the MIME type declared by a data URI."""

    match = _DATA_URI_RE.search(_as_bytes(data))
    if not match:
        raise DataURIError("input is not a base64 data URI")
    return match.group(1).decode("ascii")


def decode_data_uri(data: BytesLike) -> Tuple[bytes, str]:
    """Decode a base64 data URI into ``(payload, declared_type)``."""

    raw = _as_bytes(data)
    mime_type = data_uri_type(raw)
    try:
        decoded = base64.b64decode(strip_base_encoding(raw), validate=False)
    except binascii.Error as exc:
        raise DataURIError(f"invalid base64 payload: {exc}") from exc
    return decoded, mime_type


def data_uri_reader(data: BytesLike) -> io.BytesIO:
    """Decode a data URI into a seekable stream ready for ``put``."""

    decoded, _ = decode_data_uri(data)
    return io.BytesIO(decoded)
