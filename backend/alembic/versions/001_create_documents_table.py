"""Create documents table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `documents` table that holds every business, client and
       appointment record (one row per record, body in a JSON column).
How:   JSONB on PostgreSQL, plain JSON on other dialects.

Rollback: downgrade() drops the table (all records are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the documents table and its listing index."""
    op.create_table(
        "documents",

        # Logical collection (businesses, clients, appointments)
        sa.Column(
            "collection",
            sa.String(128),
            nullable=False,
            comment="Logical collection name, e.g. businesses",
        ),

        # uuid4 assigned by SQLDocumentStore.insert
        sa.Column(
            "id",
            sa.String(64),
            nullable=False,
            comment="Store-assigned identifier (uuid4)",
        ),

        sa.Column(
            "data",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            comment="Record body (camelCase keys, id excluded)",
        ),

        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.PrimaryKeyConstraint("collection", "id"),
    )

    # Listing order within a collection is insertion order
    op.create_index(
        "idx_documents_collection_created_at",
        "documents",
        ["collection", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_documents_collection_created_at", table_name="documents")
    op.drop_table("documents")
