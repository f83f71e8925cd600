"""Shared fakes for the storage backend tests."""

from __future__ import annotations

import io
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from storefs.adapters.storage import RemoteObject, TransportConfig, TransportError


FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self._now = now
        self.calls = 0

    def now(self) -> datetime:
        self.calls += 1
        return self._now


class FakeBody(io.BytesIO):
    """Response body that remembers whether it was closed."""

    was_closed = False

    def close(self) -> None:
        self.was_closed = True
        super().close()


class FakeTransport:
    """In-memory object store that records every request."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.last_modified: Dict[str, datetime] = {}
        self.configs: List[TransportConfig] = []
        self.puts: List[dict] = []
        self.gets: List[str] = []
        self.bodies: List[FakeBody] = []
        self.put_error: Optional[Exception] = None
        self.get_error: Optional[Exception] = None
        self._lock = threading.Lock()

    def new_service(self, config: TransportConfig) -> "FakeTransport":
        with self._lock:
            self.configs.append(config)
        return self

    def put_object(self, *, bucket, key, body, content_length, content_type) -> None:
        self.puts.append(
            {
                "bucket": bucket,
                "key": key,
                "body": body,
                "content_length": content_length,
                "content_type": content_type,
            }
        )
        if self.put_error is not None:
            raise self.put_error
        self.objects[key] = body
        self.last_modified[key] = FIXED_NOW

    def get_object(self, *, bucket, key) -> RemoteObject:
        self.gets.append(key)
        if self.get_error is not None:
            raise self.get_error
        if key not in self.objects:
            raise TransportError(f"no such key {key}")
        body = FakeBody(self.objects[key])
        self.bodies.append(body)
        return RemoteObject(body=body, last_modified=self.last_modified.get(key))


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
