"""
Database package: configuration, engine/session construction and the
document store abstraction used by repositories and services.
"""

from .base import Base
from .config import get_settings, Settings
from .session import create_engine, create_session_maker, open_document_store
from .store import (
    BatchCommitError,
    DocumentRef,
    DocumentSnapshot,
    DocumentStore,
    DocumentStoreError,
    MemoryDocumentStore,
    SqlDocumentStore,
    StoreUnavailableError,
    WriteBatch,
)

# Import models to ensure they are registered with SQLAlchemy metadata
# when the db package is imported.
from . import models as models  # noqa: F401

__all__ = [
    "Base",
    "Settings",
    "get_settings",
    "create_engine",
    "create_session_maker",
    "open_document_store",
    "BatchCommitError",
    "DocumentRef",
    "DocumentSnapshot",
    "DocumentStore",
    "DocumentStoreError",
    "MemoryDocumentStore",
    "SqlDocumentStore",
    "StoreUnavailableError",
    "WriteBatch",
    "models",
]
