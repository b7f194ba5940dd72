"""
BookingDesk Backend — Document SQLAlchemy Model
=================================================

What:  ORM model for the `documents` table backing SQLDocumentStore.
How:   One row per record; the record body is a JSON object, the row is
       addressed by (collection, id). JSONB on PostgreSQL, JSON elsewhere.
Who:   Used by SQLDocumentStore and by Alembic for schema management.

Table Design:
    - (collection, id) composite primary key: collections are namespaces
      inside one table, so several logical collections can coexist
    - id: store-assigned uuid4 string
    - data: the record body without its id
    - created_at: insertion time, used as the store-native listing order
    - updated_at: bumped by array-union updates
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from bookingdesk.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """
    A single stored record of any resource collection.

    Query Patterns:
        - Get by id: WHERE collection = :c AND id = :id (primary key)
        - List:      WHERE collection = :c [AND data->>'field' = :v ...]
                     ORDER BY created_at
    """

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Logical collection name, e.g. businesses",
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Store-assigned identifier (uuid4)",
    )

    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
        comment="Record body (camelCase keys, id excluded)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_documents_collection_created_at", "collection", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Document(collection='{self.collection}', id='{self.id}')>"
