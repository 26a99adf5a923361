from __future__ import annotations

import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import Settings, get_settings
from .store import DocumentStore, MemoryDocumentStore, SqlDocumentStore

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def create_engine(settings: Settings | None = None) -> AsyncEngine:
    """
    Build an AsyncEngine for the configured Postgres database.

    The caller owns the returned engine and must dispose of it on shutdown.
    Raises ValueError when the database configuration is incomplete.
    """
    settings = settings or get_settings()
    return create_async_engine(
        settings.async_database_url,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
    )


# PUBLIC_INTERFACE
def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the given engine."""
    return async_sessionmaker(
        bind=engine, expire_on_commit=False, autoflush=False, autocommit=False
    )


# PUBLIC_INTERFACE
def open_document_store(
    backend: str = "postgres", settings: Settings | None = None
) -> Tuple[Optional[DocumentStore], Optional[AsyncEngine]]:
    """
    Construct the process-wide document store handle.

    Returns (store, engine). The engine is None for the memory backend. When
    the Postgres configuration is incomplete the store is None and callers
    treat the dependency as unavailable.
    """
    if backend == "memory":
        return MemoryDocumentStore(), None

    settings = settings or get_settings()
    if not settings.is_configured:
        logger.error("Document store not initialized: database configuration missing")
        return None, None
    engine = create_engine(settings)
    return SqlDocumentStore(create_session_maker(engine)), engine
