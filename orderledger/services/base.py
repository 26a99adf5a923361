from __future__ import annotations

from typing import Optional

from orderledger.db.store import DocumentStore, StoreUnavailableError


class BaseService:
    """
    Base class for services. Holds the document store handle shared by the
    repositories a service uses.

    The handle may be None when the store could not be initialised; services
    decide whether that is fatal through `require_store`.
    """

    def __init__(self, store: Optional[DocumentStore]) -> None:
        self.store = store

    def require_store(self) -> DocumentStore:
        """Return the store handle or raise StoreUnavailableError."""
        if self.store is None:
            raise StoreUnavailableError("Document store not initialized")
        return self.store
