"""Transport seam between the S3 backend and the object storage API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import ObjectNotFoundError, TransportError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass(frozen=True)
class Credentials:
    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None


class CredentialProvider(Protocol):
    def retrieve(self) -> Credentials:
        ...


class EnvCredentialProvider:
    """Read credentials from the standard AWS environment variables."""

    def retrieve(self) -> Credentials:
        access_key = os.getenv("AWS_ACCESS_KEY_ID")
        secret_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        if not access_key or not secret_key:
            raise TransportError("AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set")
        return Credentials(
            access_key_id=access_key,
            secret_access_key=secret_key,
            session_token=os.getenv("AWS_SESSION_TOKEN") or None,
        )


@dataclass(frozen=True)
class TransportConfig:
    region: str
    credentials: Optional[CredentialProvider] = None
    endpoint_url: Optional[str] = None


@dataclass
class RemoteObject:
    """Body stream and metadata returned by a retrieve request."""

    body: BinaryIO
    last_modified: Optional[datetime] = None


class TransportClient(Protocol):
    def new_service(self, config: TransportConfig) -> "TransportClient":
        ...

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_length: int,
        content_type: str,
    ) -> None:
        ...

    def get_object(self, *, bucket: str, key: str) -> RemoteObject:
        ...


def _transport_error(action: str, key: str, exc: Exception) -> TransportError:
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", ""))
        if code in _NOT_FOUND_CODES:
            return ObjectNotFoundError(f"No object stored at '{key}'")
        return TransportError(f"Failed to {action} '{key}': {code or exc}")
    return TransportError(f"Failed to {action} '{key}': {exc}")


class Boto3Transport:
    """TransportClient backed by a boto3 S3 client."""

    def __init__(self, client=None) -> None:
        self._client = client

    def new_service(self, config: TransportConfig) -> "Boto3Transport":
        session_kwargs = {"region_name": config.region}
        if config.credentials is not None:
            creds = config.credentials.retrieve()
            session_kwargs.update(
                aws_access_key_id=creds.access_key_id,
                aws_secret_access_key=creds.secret_access_key,
                aws_session_token=creds.session_token,
            )
        session = boto3.session.Session(**session_kwargs)
        logger.debug(f"Opened S3 session for region '{config.region}'")
        return Boto3Transport(session.client("s3", endpoint_url=config.endpoint_url))

    def _bound(self):
        if self._client is None:
            raise TransportError("transport has no service; call new_service first")
        return self._client

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_length: int,
        content_type: str,
    ) -> None:
        try:
            self._bound().put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentLength=content_length,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise _transport_error("upload", key, exc) from exc

    def get_object(self, *, bucket: str, key: str) -> RemoteObject:
        try:
            response = self._bound().get_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise _transport_error("download", key, exc) from exc
        return RemoteObject(body=response["Body"], last_modified=response.get("LastModified"))


__all__ = [
    "Boto3Transport",
    "CredentialProvider",
    "Credentials",
    "EnvCredentialProvider",
    "RemoteObject",
    "TransportClient",
    "TransportConfig",
]
