"""
Unit tests for the in-memory document store backend and batch semantics.
"""

import asyncio

import pytest

from orderledger.db.store import (
    BatchCommitError,
    DocumentRef,
    DocumentStoreError,
    MemoryDocumentStore,
)


@pytest.fixture
def store():
    return MemoryDocumentStore({"orders": {"b": {"profit": 2}, "a": {"profit": 1}}})


def test_get_all_is_ordered_by_id(store):
    snapshots = asyncio.run(store.get_all("orders"))
    assert [snap.id for snap in snapshots] == ["a", "b"]
    assert snapshots[0].to_dict() == {"id": "a", "profit": 1}


def test_unknown_collection_is_empty(store):
    assert asyncio.run(store.get_all("nothing")) == []


def test_snapshots_are_copies(store):
    snap = asyncio.run(store.get_all("orders"))[0]
    snap.data["profit"] = 999
    assert store.documents("orders")["a"]["profit"] == 1


def test_batch_applies_set_update_delete(store):
    batch = store.batch()
    batch.set(store.ref("orders", "c"), {"profit": 3})
    batch.update(store.ref("orders", "a"), {"adjustmentAmount": 5})
    batch.delete(store.ref("orders", "b"))
    batch.delete(store.ref("orders", "missing"))
    assert len(batch) == 4
    asyncio.run(batch.commit())

    assert store.documents("orders") == {
        "a": {"profit": 1, "adjustmentAmount": 5},
        "c": {"profit": 3},
    }
    assert store.commits == [4]


def test_failed_batch_applies_nothing(store):
    batch = store.batch()
    batch.delete(store.ref("orders", "a"))
    batch.update(store.ref("orders", "missing"), {"profit": 0})

    with pytest.raises(BatchCommitError) as excinfo:
        asyncio.run(batch.commit())

    assert excinfo.value.operations == 2
    assert set(store.documents("orders")) == {"a", "b"}
    assert store.commits == []


def test_batch_commits_once(store):
    batch = store.batch()
    batch.delete(store.ref("orders", "a"))
    asyncio.run(batch.commit())

    with pytest.raises(DocumentStoreError):
        asyncio.run(batch.commit())
    with pytest.raises(DocumentStoreError):
        batch.delete(store.ref("orders", "b"))


def test_refs_normalise_ids(store):
    assert store.ref("orders", 7) == DocumentRef("orders", "7")
