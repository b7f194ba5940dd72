"""
BookingDesk Backend — Database Engine & Session Factory
=========================================================

What:  Async SQLAlchemy engine construction, session factory and ORM base.
How:   `create_engine()` builds an async engine with connection pooling for
       server databases (PostgreSQL/asyncpg) and a pool suited to SQLite
       (aiosqlite) for local runs and tests.
Who:   Used by SQLDocumentStore, Alembic and the test fixtures.
When:  The engine is built once by `create_app()`; sessions are opened per
       document store operation.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from bookingdesk.config import Settings, settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every model with one metadata object, which Alembic and
    `SQLDocumentStore.create_schema()` both read.
    """
    pass


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/").endswith(":")
    )


def create_engine(
    database_url: str, echo: bool = False, config: Optional[Settings] = None
) -> AsyncEngine:
    """
    Build the async engine for a database URL.

    SQLite engines get no pool sizing (unsupported by its pools); an
    in-memory SQLite database is pinned to a single shared connection so
    every session sees the same data.
    """
    config = config or settings
    kwargs: Dict[str, Any] = {"echo": echo}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(database_url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )

    return create_async_engine(database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: documents are read after the transaction
    commits, outside the session.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
