"""
BookingDesk Backend — Generic Repository
==========================================

What:  Typed data access for one resource kind (Business, Client, Appointment).
How:   `Repository[T]` is parameterized by a document store, a collection name,
       the Pydantic record model and a resource label used in error messages.
       Records round-trip through `model_dump(by_alias=True)` so stored keys
       match the camelCase wire format.
Who:   Called by the resource route handlers.

Error Translation:
    DocumentNotFoundError (store)  → NotFoundError   (reads only)
    any other store exception      → StoreError      (cause logged, generic message)

The repository holds no per-request state. One instance per resource is
built by create_app() and shared by every request.
"""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from bookingdesk.exceptions import NotFoundError, StoreError
from bookingdesk.services.document_store import (
    DocumentNotFoundError,
    DocumentStore,
    StoredDocument,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

IMAGES_FIELD = "images"


class Repository(Generic[T]):
    """
    Data access for one collection of records of type T.

    Operations:
        get_by_id(id)             → T              (NotFoundError, StoreError)
        list(filter)              → [T]            (StoreError)
        create(fields)            → T              (StoreError)
        delete(id)                → None           (StoreError; missing id is fine)
        append_image(id, value)   → None           (StoreError)
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        model: Type[T],
        resource: str,
    ):
        self.store = store
        self.collection = collection
        self.model = model
        self.resource = resource

    def _hydrate(self, document: StoredDocument) -> T:
        return self.model.model_validate({**document.data, "id": document.id})

    def _store_error(self, operation: str, exc: Exception, **context: Any) -> StoreError:
        logger.error(
            "Document store %s failed on %s: %s",
            operation,
            self.collection,
            str(exc),
            exc_info=True,
        )
        return StoreError(
            context={
                "operation": operation,
                "collection": self.collection,
                "original_error": type(exc).__name__,
                **context,
            }
        )

    @staticmethod
    def filter_predicates(filters: Optional[BaseModel]) -> Dict[str, Any]:
        """
        Turn a filter model into store predicates.

        Fields left as None or empty string impose no predicate.
        """
        if filters is None:
            return {}
        return {
            name: value
            for name, value in filters.model_dump(by_alias=True, exclude_none=True).items()
            if value != ""
        }

    async def get_by_id(self, record_id: str) -> T:
        try:
            document = await self.store.get(self.collection, record_id)
        except DocumentNotFoundError:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        except Exception as e:
            raise self._store_error("get", e, record_id=record_id)

        return self._hydrate(document)

    async def list(self, filters: Optional[BaseModel] = None) -> List[T]:
        predicates = self.filter_predicates(filters)
        try:
            documents = await self.store.query(self.collection, predicates)
        except Exception as e:
            raise self._store_error("query", e, predicates=predicates)

        return [self._hydrate(document) for document in documents]

    async def create(self, fields: Mapping[str, Any]) -> T:
        """
        Persist a new record built from `fields` (camelCase keys).

        Returns the record as the store now holds it, with the assigned id.
        Fields the caller did not supply take the model's defaults (e.g. an
        empty `images` list), so they are persisted too.
        """
        data = dict(fields)
        try:
            record_id = await self.store.insert(self.collection, data)
        except Exception as e:
            raise self._store_error("insert", e)

        logger.info("Created %s %s", self.resource, record_id)
        return self.model.model_validate({**data, "id": record_id})

    async def delete(self, record_id: str) -> None:
        try:
            await self.store.delete(self.collection, record_id)
        except Exception as e:
            raise self._store_error("delete", e, record_id=record_id)

        logger.info("Deleted %s %s", self.resource, record_id)

    async def append_image(self, record_id: str, value: str) -> None:
        """Add `value` to the record's images unless it is already there."""
        try:
            await self.store.array_union(self.collection, record_id, IMAGES_FIELD, value)
        except Exception as e:
            # A record deleted after the upload precheck lands here as well
            raise self._store_error("array_union", e, record_id=record_id)
