"""
BookingDesk Backend — Object Store Interface & Adapters
=========================================================

What:  Binary blob storage addressed by (bucket, key).
How:   `ObjectStore` is the abstract contract; two adapters ship:
       - FilesystemObjectStore: <storage_root>/<bucket>/<key> on local disk,
         written with aiofiles so the event loop is never blocked
       - MinioObjectStore: an S3-compatible bucket through the minio client,
         whose blocking calls run in Starlette's threadpool
Who:   Used only by ImageManager.

Keys may contain "/" (ImageManager stores blobs as <record id>/<uuid>).
"""

import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
from minio import Minio
from minio.error import S3Error
from starlette.concurrency import run_in_threadpool

from bookingdesk.exceptions import ObjectStoreError

logger = logging.getLogger(__name__)


class ObjectNotFoundError(Exception):
    """Raised by an object store when (bucket, key) holds no blob."""

    def __init__(self, bucket: str, key: str):
        super().__init__(f"object {bucket}/{key} not found")
        self.bucket = bucket
        self.key = key


class ObjectStore(ABC):
    """Abstract blob store. One instance is shared by all requests."""

    @abstractmethod
    async def put(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        """Write `data` under (bucket, key), replacing any existing blob."""
        ...

    @abstractmethod
    async def get(self, bucket: str, key: str) -> bytes:
        """Read a blob. Raises ObjectNotFoundError when absent."""
        ...

    async def ping(self) -> bool:
        return True


class FilesystemObjectStore(ObjectStore):
    """
    Stores blobs as files below a root directory.

    Directory Structure:
        storage/
        └── <bucket>/
            └── <record id>/
                ├── a1b2c3d4-....
                └── e5f6g7h8-....
    """

    def __init__(self, storage_root: str):
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FilesystemObjectStore initialized with storage_root=%s", self.storage_root)

    def _path_for(self, bucket: str, key: str) -> Path:
        """
        Resolve (bucket, key) to a file below storage_root.

        Raises:
            ObjectStoreError if the resolved path escapes storage_root
            (e.g. a key containing "../").
        """
        path = (self.storage_root / bucket / key).resolve()
        if not path.is_relative_to(self.storage_root):
            raise ObjectStoreError(
                message="Invalid object key",
                context={"bucket": bucket, "key": key},
            )
        return path

    async def put(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        path = self._path_for(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to store object at %s: %s", path, str(e))
            raise ObjectStoreError(
                message="Failed to save uploaded image. Please try again.",
                context={"bucket": bucket, "key": key, "os_error": str(e)},
            )

        logger.info("Object stored: %s/%s (%d bytes)", bucket, key, len(data))

    async def get(self, bucket: str, key: str) -> bytes:
        path = self._path_for(bucket, key)
        if not path.is_file():
            raise ObjectNotFoundError(bucket, key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            logger.error("Failed to read object at %s: %s", path, str(e))
            raise ObjectStoreError(
                message="Failed to read image. Please try again.",
                context={"bucket": bucket, "key": key, "os_error": str(e)},
            )

    async def ping(self) -> bool:
        return self.storage_root.is_dir()


class MinioObjectStore(ObjectStore):
    """
    Stores blobs in S3-compatible buckets through the minio client.

    Buckets are created on first write. The minio client is synchronous, so
    every call is moved off the event loop.
    """

    NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject", "NoSuchEntity", "NoSuchBucket"}

    def __init__(self, client: Minio):
        self.client = client
        self._checked_buckets: set = set()

    @classmethod
    def from_settings(cls, settings) -> "MinioObjectStore":
        return cls(
            Minio(
                settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                secure=settings.minio_secure,
            )
        )

    def _ensure_bucket(self, bucket: str) -> None:
        if bucket in self._checked_buckets:
            return
        try:
            if not self.client.bucket_exists(bucket):
                self.client.make_bucket(bucket)
        except S3Error as exc:
            if exc.code not in {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}:
                raise
        self._checked_buckets.add(bucket)

    def _put_sync(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        self._ensure_bucket(bucket)
        self.client.put_object(
            bucket,
            key,
            io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    def _get_sync(self, bucket: str, key: str) -> bytes:
        response = self.client.get_object(bucket, key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    async def put(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        try:
            await run_in_threadpool(
                self._put_sync, bucket, key, data, content_type or "application/octet-stream"
            )
        except S3Error as exc:
            logger.error("minio put failed for %s/%s: %s", bucket, key, exc.code or str(exc))
            raise ObjectStoreError(
                message="Failed to save uploaded image. Please try again.",
                context={"bucket": bucket, "key": key, "error": exc.code or str(exc)},
            )

        logger.info("Object stored: %s/%s (%d bytes)", bucket, key, len(data))

    async def get(self, bucket: str, key: str) -> bytes:
        try:
            return await run_in_threadpool(self._get_sync, bucket, key)
        except S3Error as exc:
            if exc.code in self.NOT_FOUND_CODES:
                raise ObjectNotFoundError(bucket, key)
            logger.error("minio get failed for %s/%s: %s", bucket, key, exc.code or str(exc))
            raise ObjectStoreError(
                message="Failed to read image. Please try again.",
                context={"bucket": bucket, "key": key, "error": exc.code or str(exc)},
            )

    async def ping(self) -> bool:
        try:
            await run_in_threadpool(self.client.list_buckets)
            return True
        except Exception as e:
            logger.warning("Object store ping failed: %s", str(e))
            return False
