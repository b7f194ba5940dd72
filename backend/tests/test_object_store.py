"""
BookingDesk Backend — Object Store Tests
==========================================

What:  FilesystemObjectStore against tmp_path; MinioObjectStore against a
       mocked minio client (no server needed).
"""

import pytest
from unittest.mock import MagicMock

from minio.error import S3Error

from bookingdesk.exceptions import ObjectStoreError
from bookingdesk.services.object_store import (
    FilesystemObjectStore,
    MinioObjectStore,
    ObjectNotFoundError,
)


def _s3_error(code: str) -> S3Error:
    return S3Error(
        code=code,
        message=code,
        resource="/bucket/key",
        request_id="req",
        host_id="host",
        response=MagicMock(),
    )


class TestFilesystemObjectStore:

    @pytest.mark.asyncio
    async def test_put_then_get(self, tmp_path):
        store = FilesystemObjectStore(str(tmp_path))

        await store.put("images", "rec-1/key-1", b"jpeg-bytes", content_type="image/jpeg")

        assert await store.get("images", "rec-1/key-1") == b"jpeg-bytes"
        assert (tmp_path / "images" / "rec-1" / "key-1").read_bytes() == b"jpeg-bytes"

    @pytest.mark.asyncio
    async def test_put_replaces_existing_blob(self, tmp_path):
        store = FilesystemObjectStore(str(tmp_path))

        await store.put("images", "k", b"old")
        await store.put("images", "k", b"new")

        assert await store.get("images", "k") == b"new"

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, tmp_path):
        store = FilesystemObjectStore(str(tmp_path))
        with pytest.raises(ObjectNotFoundError):
            await store.get("images", "nope")

    @pytest.mark.asyncio
    async def test_path_traversal_is_rejected(self, tmp_path):
        store = FilesystemObjectStore(str(tmp_path / "root"))
        with pytest.raises(ObjectStoreError):
            await store.put("images", "../../escape", b"x")

    @pytest.mark.asyncio
    async def test_ping(self, tmp_path):
        store = FilesystemObjectStore(str(tmp_path))
        assert await store.ping() is True


class TestMinioObjectStore:

    @pytest.mark.asyncio
    async def test_put_creates_bucket_once_and_streams_bytes(self):
        client = MagicMock()
        client.bucket_exists.return_value = False
        store = MinioObjectStore(client)

        await store.put("images", "rec/k1", b"abc", content_type="image/png")
        await store.put("images", "rec/k2", b"defg")

        client.make_bucket.assert_called_once_with("images")
        assert client.put_object.call_count == 2
        args, kwargs = client.put_object.call_args_list[0]
        assert args[0] == "images"
        assert args[1] == "rec/k1"
        assert args[2].read() == b"abc"
        assert kwargs["length"] == 3
        assert kwargs["content_type"] == "image/png"
        assert client.put_object.call_args_list[1].kwargs["content_type"] == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_get_reads_and_releases_response(self):
        client = MagicMock()
        response = MagicMock()
        response.read.return_value = b"blob"
        client.get_object.return_value = response
        store = MinioObjectStore(client)

        assert await store.get("images", "rec/k1") == b"blob"
        response.close.assert_called_once()
        response.release_conn.assert_called_once()

    @pytest.mark.asyncio
    async def test_get_missing_key_raises_not_found(self):
        client = MagicMock()
        client.get_object.side_effect = _s3_error("NoSuchKey")
        store = MinioObjectStore(client)

        with pytest.raises(ObjectNotFoundError):
            await store.get("images", "rec/missing")

    @pytest.mark.asyncio
    async def test_put_failure_raises_object_store_error(self):
        client = MagicMock()
        client.bucket_exists.return_value = True
        client.put_object.side_effect = _s3_error("AccessDenied")
        store = MinioObjectStore(client)

        with pytest.raises(ObjectStoreError):
            await store.put("images", "rec/k1", b"abc")

    @pytest.mark.asyncio
    async def test_ping_failure_reports_unavailable(self):
        client = MagicMock()
        client.list_buckets.side_effect = ConnectionError("refused")
        assert await MinioObjectStore(client).ping() is False
