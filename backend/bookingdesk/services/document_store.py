"""
BookingDesk Backend — Document Store Interface & SQLAlchemy Adapter
=====================================================================

What:  The contract the repositories need from a document store, and the
       adapter that implements it on top of async SQLAlchemy.
How:   `DocumentStore` is an abstract base class. `SQLDocumentStore` keeps
       every record as one row of the `documents` table (see
       models/document.py) and opens one short transaction per operation.
Who:   Called only by `Repository`. Handlers never talk to the store.

Contract:
    get(collection, id)                     → StoredDocument | DocumentNotFoundError
    query(collection, predicates)           → [StoredDocument]  (AND of equalities)
    insert(collection, data)                → id  (store-assigned)
    array_union(collection, id, field, v)   → adds v to data[field] unless present
    delete(collection, id)                  → no error when the id is absent

Any other failure propagates as the driver's own exception; the repository
wraps it in StoreError.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete as sql_delete
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from bookingdesk.database import Base, create_session_factory
from bookingdesk.models.document import Document

logger = logging.getLogger(__name__)


class DocumentNotFoundError(Exception):
    """Raised by a document store when (collection, id) holds no record."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"document {collection}/{document_id} not found")
        self.collection = collection
        self.document_id = document_id


@dataclass(frozen=True)
class StoredDocument:
    """A record body together with the id the store assigned to it."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """
    Abstract document store.

    Implementations must be safe to share across concurrent requests: the
    application builds one instance at startup and never replaces it.
    """

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> StoredDocument:
        """Fetch one record. Raises DocumentNotFoundError when absent."""
        ...

    @abstractmethod
    async def query(
        self, collection: str, predicates: Optional[Mapping[str, Any]] = None
    ) -> List[StoredDocument]:
        """All records whose fields equal every predicate (empty → all)."""
        ...

    @abstractmethod
    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        """Persist a new record and return its store-assigned id."""
        ...

    @abstractmethod
    async def array_union(
        self, collection: str, document_id: str, field_name: str, value: Any
    ) -> None:
        """
        Add `value` to the list stored under `field_name`.

        A value already present is not added again. A missing field starts
        as an empty list. Raises DocumentNotFoundError for unknown ids.
        """
        ...

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """Remove a record. Deleting an unknown id is not an error."""
        ...

    async def ping(self) -> bool:
        """Lightweight reachability check for /health."""
        return True

    async def create_schema(self) -> None:
        """Create whatever backing structures the store needs (idempotent)."""

    async def close(self) -> None:
        """Release connections held by the store."""


class SQLDocumentStore(DocumentStore):
    """
    Document store backed by one SQL table.

    Works with PostgreSQL (asyncpg, JSONB) in production and SQLite
    (aiosqlite, JSON1) for local runs and tests. Predicates compare the
    string form of top-level JSON fields.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    async def get(self, collection: str, document_id: str) -> StoredDocument:
        async with self._session_factory() as session:
            row = await session.get(Document, (collection, document_id))
            if row is None:
                raise DocumentNotFoundError(collection, document_id)
            return StoredDocument(id=row.id, data=dict(row.data))

    async def query(
        self, collection: str, predicates: Optional[Mapping[str, Any]] = None
    ) -> List[StoredDocument]:
        stmt = select(Document).where(Document.collection == collection)
        for name, value in (predicates or {}).items():
            stmt = stmt.where(Document.data[name].as_string() == str(value))
        stmt = stmt.order_by(Document.created_at)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()

        logger.debug(
            "Query %s %s matched %d documents", collection, dict(predicates or {}), len(rows)
        )
        return [StoredDocument(id=row.id, data=dict(row.data)) for row in rows]

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        document_id = str(uuid.uuid4())
        async with self._session_factory() as session, session.begin():
            session.add(Document(collection=collection, id=document_id, data=dict(data)))
        return document_id

    async def array_union(
        self, collection: str, document_id: str, field_name: str, value: Any
    ) -> None:
        stmt = (
            select(Document)
            .where(Document.collection == collection, Document.id == document_id)
            .with_for_update()
        )
        async with self._session_factory() as session, session.begin():
            row = (await session.execute(stmt)).scalar_one_or_none()
            if row is None:
                raise DocumentNotFoundError(collection, document_id)

            current = list(row.data.get(field_name) or [])
            if value in current:
                return
            current.append(value)
            # Reassign so SQLAlchemy notices the JSON change
            row.data = {**row.data, field_name: current}

    async def delete(self, collection: str, document_id: str) -> None:
        stmt = sql_delete(Document).where(
            Document.collection == collection, Document.id == document_id
        )
        async with self._session_factory() as session, session.begin():
            await session.execute(stmt)

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Document store ping failed: %s", str(e))
            return False

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Document store schema ensured")

    async def close(self) -> None:
        await self.engine.dispose()
