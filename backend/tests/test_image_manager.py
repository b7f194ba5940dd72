"""
BookingDesk Backend — Image Manager Tests
===========================================
"""

import pytest
from unittest.mock import AsyncMock

from bookingdesk.exceptions import NotFoundError, ObjectStoreError
from bookingdesk.schemas.business import Business
from bookingdesk.services.image_manager import ImageManager


@pytest.fixture
def manager(object_store):
    return ImageManager(object_store, "bucket")


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_stores_under_record_prefix(self, manager, object_store):
        key = await manager.upload("rec-1", b"bytes", content_type="image/jpeg")

        assert await object_store.get("bucket", f"rec-1/{key}") == b"bytes"

    @pytest.mark.asyncio
    async def test_each_upload_gets_a_fresh_key(self, manager):
        first = await manager.upload("rec-1", b"same")
        second = await manager.upload("rec-1", b"same")
        assert first != second

    @pytest.mark.asyncio
    async def test_object_store_failure_propagates(self):
        store = AsyncMock()
        store.put.side_effect = ObjectStoreError()
        manager = ImageManager(store, "bucket")

        with pytest.raises(ObjectStoreError):
            await manager.upload("rec-1", b"bytes")


class TestUrls:

    def test_image_url_format(self, manager):
        assert manager.image_url("rec-1", "k1") == "bucket/rec-1/k1"

    def test_parse_url_round_trip(self, manager):
        assert manager.parse_url("bucket/rec-1/k1") == ("rec-1", "k1")

    @pytest.mark.parametrize("url", ["other/rec-1/k1", "bucket/rec-1", "bucket//k1", "bucket/"])
    def test_parse_url_rejects_foreign_urls(self, manager, url):
        assert manager.parse_url(url) is None


class TestFetch:

    @pytest.mark.asyncio
    async def test_fetch_returns_uploaded_bytes(self, manager):
        key = await manager.upload("rec-1", b"bytes")
        assert await manager.fetch("rec-1", key) == b"bytes"

    @pytest.mark.asyncio
    async def test_fetch_missing_raises_not_found(self, manager):
        with pytest.raises(NotFoundError) as exc_info:
            await manager.fetch("rec-1", "missing")
        assert exc_info.value.message == "image not found"

    @pytest.mark.asyncio
    async def test_fetch_all_reads_images_in_list_order(self, manager):
        k1 = await manager.upload("rec-1", b"one")
        k2 = await manager.upload("rec-1", b"two")
        record = Business(
            id="rec-1",
            name="Barky",
            category="pets",
            images=[
                manager.image_url("rec-1", k2),
                "elsewhere/rec-1/k9",
                manager.image_url("rec-1", k1),
            ],
        )

        assert await manager.fetch_all(record) == [
            (manager.image_url("rec-1", k2), b"two"),
            (manager.image_url("rec-1", k1), b"one"),
        ]
