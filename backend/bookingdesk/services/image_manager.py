"""
BookingDesk Backend — Image Manager
=====================================

What:  Stores and reads record images in the object store.
How:   Each upload gets a fresh uuid4 key and is written to
       <bucket>/<record id>/<key>. The URL recorded on the record is that
       same "<bucket>/<record id>/<key>" string.
Who:   Called by the image handlers of businesses and clients.

Upload → Append Sequence:
    handler ──upload()──▶ ObjectStore.put      (blob written)
    handler ──image_url()─▶ url
    handler ──Repository.append_image(url)──▶ DocumentStore.array_union

If the append fails the blob stays in the object store. Nothing cleans it up.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from bookingdesk.exceptions import NotFoundError
from bookingdesk.schemas.common import ImageOwnerModel
from bookingdesk.services.object_store import ObjectNotFoundError, ObjectStore

logger = logging.getLogger(__name__)


class ImageManager:
    """Couples the object store with the record image naming scheme."""

    def __init__(self, object_store: ObjectStore, bucket: str):
        self.object_store = object_store
        self.bucket = bucket

    @staticmethod
    def generate_key() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def object_name(resource_id: str, key: str) -> str:
        return f"{resource_id}/{key}"

    def image_url(self, resource_id: str, key: str) -> str:
        return f"{self.bucket}/{self.object_name(resource_id, key)}"

    def parse_url(self, url: str) -> Optional[Tuple[str, str]]:
        """
        Split an image URL recorded by this manager into (resource_id, key).

        Returns None for URLs that do not belong to this manager's bucket.
        """
        prefix = f"{self.bucket}/"
        if not url.startswith(prefix):
            return None
        resource_id, sep, key = url[len(prefix):].partition("/")
        if not sep or not resource_id or not key:
            return None
        return resource_id, key

    async def upload(
        self,
        resource_id: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Write `data` under a new key for `resource_id` and return the key.

        Raises:
            ObjectStoreError: the object store rejected the write
        """
        key = self.generate_key()
        await self.object_store.put(
            self.bucket,
            self.object_name(resource_id, key),
            data,
            content_type=content_type,
        )
        logger.info("Image uploaded for %s: key=%s (%d bytes)", resource_id, key, len(data))
        return key

    async def fetch(self, resource_id: str, key: str) -> bytes:
        try:
            return await self.object_store.get(self.bucket, self.object_name(resource_id, key))
        except ObjectNotFoundError:
            raise NotFoundError(resource="image", resource_id=key)

    async def fetch_all(self, record: ImageOwnerModel) -> List[Tuple[str, bytes]]:
        """
        Read every image listed on `record`, in list order.

        Returns (url, bytes) pairs. URLs outside this manager's bucket are
        skipped with a warning.
        """
        blobs = []
        for url in record.images:
            parsed = self.parse_url(url)
            if parsed is None:
                logger.warning("Skipping image URL outside bucket %s: %s", self.bucket, url)
                continue
            blobs.append((url, await self.fetch(*parsed)))
        return blobs
