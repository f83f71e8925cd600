import io
import threading
from datetime import datetime, timezone

import pytest

from storefs.adapters.storage import (
    Credentials,
    ObjectNotFoundError,
    PathFormatError,
    S3FileSystem,
    StorageError,
    TransportError,
)
from storefs.adapters.storage.base import OBJECT_MODE


class StaticProvider:
    def __init__(self):
        self.calls = 0

    def retrieve(self):
        self.calls += 1
        return Credentials("key", "secret")


def make_fs(transport, clock, provider=None):
    return S3FileSystem("region", "bucket", provider, transport=transport, clock=clock)


def test_put_uploads_and_wraps_response(transport, clock, fixed_now):
    fs = make_fs(transport, clock)
    content = b"some content"

    handle = fs.put(io.BytesIO(content), "some/file.jpg")

    assert transport.puts == [
        {
            "bucket": "bucket",
            "key": "some/file.jpg",
            "body": content,
            "content_length": len(content),
            "content_type": "image/jpeg",
        }
    ]
    info = handle.stat()
    assert info.name == "https://s3-region.amazonaws.com/bucket/some/file.jpg"
    assert info.key == "some/file.jpg"
    assert info.mod_time == fixed_now
    assert info.size == len(content)
    assert info.is_dir is False
    assert info.mode == OBJECT_MODE
    assert info.sys() is None
    assert handle.read() == content


def test_put_sanitizes_key(transport, clock):
    fs = make_fs(transport, clock)

    handle = fs.put(io.BytesIO(b"x"), " my dir/my  file.png ")

    assert transport.puts[0]["key"] == "my-dir/my-file.png"
    assert transport.puts[0]["content_type"] == "image/png"
    assert handle.name.endswith("/bucket/my-dir/my-file.png")


def test_put_transport_error_returns_no_handle(transport, clock):
    error = TransportError("s3 problem")
    transport.put_error = error
    fs = make_fs(transport, clock)

    with pytest.raises(TransportError) as excinfo:
        fs.put(io.BytesIO(b"some content"), "some/file.jpg")

    assert excinfo.value is error
    assert clock.calls == 0


@pytest.mark.parametrize("path", ["   ", "some/", "some/file"])
def test_put_malformed_path_makes_no_request(transport, clock, path):
    fs = make_fs(transport, clock)

    with pytest.raises(PathFormatError):
        fs.put(io.BytesIO(b"data"), path)

    assert transport.configs == []
    assert transport.puts == []


def test_get_returns_url_and_last_modified(transport, clock):
    modified = datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    transport.objects["some/file.jpg"] = b"some body"
    transport.last_modified["some/file.jpg"] = modified
    fs = make_fs(transport, clock)

    handle = fs.get("some/file.jpg")

    info = handle.stat()
    assert info.name == "https://s3-region.amazonaws.com/bucket/some/file.jpg"
    assert info.mod_time == modified
    assert handle.read() == b"some body"
    assert transport.bodies[0].was_closed
    assert clock.calls == 0


def test_get_uses_raw_key(transport, clock):
    fs = make_fs(transport, clock)
    transport.objects["raw key.txt"] = b"spaced"

    assert fs.get("raw key.txt").read() == b"spaced"
    assert transport.gets == ["raw key.txt"]


def test_get_not_found_propagates(transport, clock):
    transport.get_error = ObjectNotFoundError("missing")
    fs = make_fs(transport, clock)

    with pytest.raises(ObjectNotFoundError):
        fs.get("missing.txt")


def test_round_trip(transport, clock):
    fs = make_fs(transport, clock)
    content = bytes(range(256))

    stored = fs.put(io.BytesIO(content), "bin/data.bin")
    fetched = fs.get(stored.stat().key)

    assert fetched.read() == content
    assert fetched.seek(0) == 0
    assert fetched.read(4) == content[:4]


def test_write_reuploads_by_key(transport, clock):
    fs = make_fs(transport, clock)
    handle = fs.put(io.BytesIO(b"first"), "docs/readme.txt")

    written = handle.write(b"second version")

    assert written == len(b"second version")
    assert [put["key"] for put in transport.puts] == ["docs/readme.txt", "docs/readme.txt"]
    assert transport.objects["docs/readme.txt"] == b"second version"
    info = handle.stat()
    assert info.size == len(b"second version")
    assert info.key == "docs/readme.txt"
    assert handle.read() == b""
    handle.seek(0)
    assert handle.read() == b"second version"


def test_write_on_fetched_handle_targets_original_key(transport, clock, fixed_now):
    transport.objects["a/b.txt"] = b"old"
    transport.last_modified["a/b.txt"] = fixed_now
    fs = make_fs(transport, clock)

    handle = fs.get("a/b.txt")
    handle.write(b"new")

    assert transport.puts[-1]["key"] == "a/b.txt"
    assert fs.get("a/b.txt").read() == b"new"


def test_write_failure_keeps_snapshot(transport, clock):
    fs = make_fs(transport, clock)
    handle = fs.put(io.BytesIO(b"first"), "docs/readme.txt")
    transport.put_error = TransportError("down")

    with pytest.raises(TransportError):
        handle.write(b"second")

    handle.seek(0)
    assert handle.read() == b"first"


def test_close_releases_buffer(transport, clock):
    handle = make_fs(transport, clock).put(io.BytesIO(b"x"), "f.txt")

    handle.close()

    assert handle.closed
    with pytest.raises(ValueError):
        handle.write(b"y")


def test_service_is_built_once_with_credentials(transport, clock):
    provider = StaticProvider()
    fs = make_fs(transport, clock, provider)

    fs.put(io.BytesIO(b"a"), "a.txt")
    fs.put(io.BytesIO(b"b"), "b.txt")
    fs.get("a.txt")

    assert len(transport.configs) == 1
    config = transport.configs[0]
    assert config.region == "region"
    assert config.credentials is provider


def test_concurrent_puts_share_one_service(transport, clock):
    fs = make_fs(transport, clock)

    def upload(index):
        fs.put(io.BytesIO(b"x" * index), f"items/{index}.bin")

    threads = [threading.Thread(target=upload, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(transport.configs) == 1
    assert sorted(transport.objects) == sorted(f"items/{i}.bin" for i in range(8))


def test_file_url_honours_host_settings(transport, clock):
    fs = S3FileSystem(
        "eu-west-1",
        "media",
        transport=transport,
        clock=clock,
        host_prefix="storage",
        domain="example.com",
    )

    assert fs.file_url("x/y.png") == "https://storage-eu-west-1.example.com/media/x/y.png"


@pytest.mark.parametrize("region, bucket", [("", "bucket"), ("region", "")])
def test_missing_configuration_rejected(region, bucket):
    with pytest.raises(StorageError):
        S3FileSystem(region, bucket)


@pytest.mark.parametrize("key", ["raw key.txt", "README", "docs/ spaced  name"])
def test_write_on_fetched_handle_keeps_unnormalized_key(transport, clock, key):
    transport.objects[key] = b"old"
    fs = make_fs(transport, clock)

    handle = fs.get(key)
    handle.write(b"new")

    assert [put["key"] for put in transport.puts] == [key]
    assert transport.objects[key] == b"new"
    assert handle.stat().key == key
    assert fs.get(key).read() == b"new"
