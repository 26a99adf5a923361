"""
Document store used by the order tracker.

The store exposes three primitives: read every document of a named
collection, stage writes (set/update/delete by reference) on a batch, and
commit a batch atomically. Two backends are provided:

- SqlDocumentStore: documents kept as JSONB rows in the `documents` table.
- MemoryDocumentStore: in-process dictionaries, for tests and local runs.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderledger.db.models.document import Document

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Base class for document store failures."""


class StoreUnavailableError(DocumentStoreError):
    """The document store has not been initialised for this process."""


class BatchCommitError(DocumentStoreError):
    """A staged batch failed to apply. None of its operations were applied."""

    def __init__(self, message: str, operations: int = 0) -> None:
        super().__init__(message)
        self.operations = operations


@dataclass(frozen=True)
class DocumentRef:
    """Address of one document."""
    collection: str
    id: str


@dataclass
class DocumentSnapshot:
    """A document as read from the store."""
    ref: DocumentRef
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.ref.id

    def to_dict(self) -> Dict[str, Any]:
        """Field map with the document id merged in under `id`."""
        return {"id": self.ref.id, **self.data}


_Operation = Tuple[str, DocumentRef, Optional[Dict[str, Any]]]


class WriteBatch:
    """
    Staged write operations committed as one atomic unit.

    A batch can be committed once; start a new batch from the store afterwards.
    """

    def __init__(self) -> None:
        self._ops: List[_Operation] = []
        self._committed = False

    def set(self, ref: DocumentRef, data: Mapping[str, Any]) -> None:
        """Create or replace the document at `ref`."""
        self._stage("set", ref, dict(data))

    def update(self, ref: DocumentRef, fields: Mapping[str, Any]) -> None:
        """Overwrite the given fields of an existing document."""
        self._stage("update", ref, dict(fields))

    def delete(self, ref: DocumentRef) -> None:
        """Delete the document at `ref`; deleting a missing document is a no-op."""
        self._stage("delete", ref, None)

    def __len__(self) -> int:
        return len(self._ops)

    async def commit(self) -> None:
        """Apply every staged operation atomically."""
        if self._committed:
            raise DocumentStoreError("Batch has already been committed")
        self._committed = True
        await self._apply(list(self._ops))

    def _stage(self, kind: str, ref: DocumentRef, payload: Optional[Dict[str, Any]]) -> None:
        if self._committed:
            raise DocumentStoreError("Cannot stage operations on a committed batch")
        self._ops.append((kind, ref, payload))

    async def _apply(self, ops: List[_Operation]) -> None:
        raise NotImplementedError


class DocumentStore:
    """Interface shared by the store backends."""

    def ref(self, collection: str, doc_id: Any) -> DocumentRef:
        return DocumentRef(collection, str(doc_id))

    async def get_all(self, collection: str) -> List[DocumentSnapshot]:
        """Return every document of `collection`, ordered by id."""
        raise NotImplementedError

    def batch(self) -> WriteBatch:
        """Start a new empty batch."""
        raise NotImplementedError


class SqlWriteBatch(WriteBatch):
    """Batch applied inside a single database transaction."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._session_maker = session_maker

    async def _apply(self, ops: List[_Operation]) -> None:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    for kind, ref, payload in ops:
                        await self._apply_one(session, kind, ref, payload)
        except SQLAlchemyError as exc:
            raise BatchCommitError(
                f"Failed to commit batch of {len(ops)} operations: {exc}", len(ops)
            ) from exc

    @staticmethod
    async def _apply_one(
        session: AsyncSession,
        kind: str,
        ref: DocumentRef,
        payload: Optional[Dict[str, Any]],
    ) -> None:
        if kind == "delete":
            await session.execute(
                delete(Document).where(
                    Document.collection == ref.collection, Document.doc_id == ref.id
                )
            )
            return

        row = await session.get(Document, (ref.collection, ref.id))
        if kind == "set":
            if row is None:
                session.add(Document(collection=ref.collection, doc_id=ref.id, data=payload or {}))
            else:
                row.data = payload or {}
                row.updated_at = func.now()
            return

        if row is None:
            raise BatchCommitError(f"No document to update: {ref.collection}/{ref.id}")
        # JSONB is not mutation-tracked; assign a new dict
        row.data = {**(row.data or {}), **(payload or {})}
        row.updated_at = func.now()


# PUBLIC_INTERFACE
class SqlDocumentStore(DocumentStore):
    """Document store over the `documents` table."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def get_all(self, collection: str) -> List[DocumentSnapshot]:
        async with self._session_maker() as session:
            res = await session.execute(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.doc_id)
            )
            return [
                DocumentSnapshot(DocumentRef(collection, row.doc_id), dict(row.data or {}))
                for row in res.scalars()
            ]

    def batch(self) -> WriteBatch:
        return SqlWriteBatch(self._session_maker)


class MemoryWriteBatch(WriteBatch):
    def __init__(self, store: "MemoryDocumentStore") -> None:
        super().__init__()
        self._store = store

    async def _apply(self, ops: List[_Operation]) -> None:
        self._store._apply(ops)


# PUBLIC_INTERFACE
class MemoryDocumentStore(DocumentStore):
    """
    In-process document store with the same batch semantics as the SQL backend.

    `commits` records the size of every successfully committed batch.
    """

    def __init__(self, data: Optional[Mapping[str, Mapping[str, Mapping[str, Any]]]] = None) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {
            name: {str(doc_id): copy.deepcopy(dict(doc)) for doc_id, doc in docs.items()}
            for name, docs in (data or {}).items()
        }
        self.commits: List[int] = []

    async def get_all(self, collection: str) -> List[DocumentSnapshot]:
        docs = self._collections.get(collection, {})
        return [
            DocumentSnapshot(DocumentRef(collection, doc_id), copy.deepcopy(doc))
            for doc_id, doc in sorted(docs.items())
        ]

    def batch(self) -> WriteBatch:
        return MemoryWriteBatch(self)

    def documents(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """Copy of the documents currently stored in `collection`."""
        return copy.deepcopy(self._collections.get(collection, {}))

    def _apply(self, ops: List[_Operation]) -> None:
        staged = copy.deepcopy(self._collections)
        for kind, ref, payload in ops:
            docs = staged.setdefault(ref.collection, {})
            if kind == "delete":
                docs.pop(ref.id, None)
            elif kind == "set":
                docs[ref.id] = copy.deepcopy(payload or {})
            else:
                if ref.id not in docs:
                    raise BatchCommitError(
                        f"No document to update: {ref.collection}/{ref.id}", len(ops)
                    )
                docs[ref.id].update(copy.deepcopy(payload or {}))
        self._collections = staged
        self.commits.append(len(ops))
