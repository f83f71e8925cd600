"""Backend construction from environment configuration."""

from __future__ import annotations

from functools import lru_cache

from .adapters.storage import EnvCredentialProvider, FileSystem, LocalFileSystem, S3FileSystem
from .core import config


def build_filesystem() -> FileSystem:
    if config.STORAGE_PROVIDER == "s3":
        missing = []
        if not config.S3_REGION:
            missing.append("S3_REGION")
        if not config.S3_BUCKET:
            missing.append("S3_BUCKET")
        if missing:
            joined = ", ".join(missing)
            raise RuntimeError(f"S3 storage enabled but missing required env vars: {joined}")
        return S3FileSystem(
            config.S3_REGION or "",
            config.S3_BUCKET or "",
            EnvCredentialProvider() if config.AWS_ACCESS_KEY_ID else None,
            endpoint_url=config.S3_ENDPOINT_URL,
            host_prefix=config.S3_HOST_PREFIX,
            domain=config.S3_DOMAIN,
        )
    return LocalFileSystem()


@lru_cache(maxsize=1)
def _filesystem() -> FileSystem:
    return build_filesystem()


def get_filesystem() -> FileSystem:
    return _filesystem()
