from __future__ import annotations

from typing import Any, Dict, List

from orderledger.db.store import DocumentSnapshot, DocumentStore


class BaseRepository:
    """
    Base class for repositories over one document collection.

    Subclasses set `collection` and convert snapshots to their schema type.
    """

    collection: str = ""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def snapshots(self) -> List[DocumentSnapshot]:
        """Every document of the collection."""
        return await self.store.get_all(self.collection)

    async def records(self) -> List[Dict[str, Any]]:
        """Every document of the collection as a field map with its id."""
        return [snap.to_dict() for snap in await self.snapshots()]
