from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from orderledger.db.collection_names import (
    INVESTMENT,
    INVESTMENT_ACTIVITY,
    LEDGER_ACTIVITIES,
    LEDGER_ENTRIES,
    ORDERS,
    PARTY_PAYMENTS,
)
from orderledger.db.store import DocumentRef, DocumentStore, StoreUnavailableError
from orderledger.schemas.common import to_number
from orderledger.schemas.maintenance import ClearOptions, ClearSummary
from orderledger.services.base import BaseService

logger = logging.getLogger(__name__)

# Document-store transactions cap writes per commit near 500.
MAX_BATCH_SIZE = 450

_CLEARED_ORDER_PAYMENTS = {
    "partialPayments": [],
    "customerPayments": [],
    "adjustmentAmount": 0,
}


def has_payment_state(data: Mapping[str, Any]) -> bool:
    """True if an order document carries payments or a manual adjustment to reset."""
    return (
        bool(data.get("partialPayments"))
        or bool(data.get("customerPayments"))
        or to_number(data.get("adjustmentAmount")) != 0
    )


class BatchWriter:
    """
    One logical batch with an operation counter.

    Staging an operation that brings the counter to the limit commits the
    batch and starts a new one. Commit failures propagate to the caller.
    """

    def __init__(self, store: DocumentStore, limit: int = MAX_BATCH_SIZE) -> None:
        if limit < 1:
            raise ValueError("Batch limit must be at least 1")
        self._store = store
        self._limit = limit
        self._batch = store.batch()
        self.count = 0
        self.operations = 0
        self.batch_sizes: List[int] = []

    async def set(self, ref: DocumentRef, data: Mapping[str, Any]) -> None:
        self._batch.set(ref, data)
        await self._staged()

    async def delete(self, ref: DocumentRef) -> None:
        self._batch.delete(ref)
        await self._staged()

    async def update(self, ref: DocumentRef, fields: Mapping[str, Any]) -> None:
        self._batch.update(ref, fields)
        await self._staged()

    async def flush_if_full(self) -> None:
        if self.count >= self._limit:
            await self.flush()

    async def flush(self) -> None:
        """Commit staged operations, if any, and start a fresh batch."""
        if self.count == 0:
            return
        size = self.count
        await self._batch.commit()
        logger.info("Committed batch of %d operations", size)
        self.batch_sizes.append(size)
        self._batch = self._store.batch()
        self.count = 0

    async def _staged(self) -> None:
        self.count += 1
        self.operations += 1
        await self.flush_if_full()


class MaintenanceService(BaseService):
    """
    Bulk clearing of financial records.

    Sweeps are not atomic as a whole: each committed batch stays applied if a
    later commit fails. Concurrent sweeps against one store must be serialized
    by the caller.
    """

    def __init__(self, store: Optional[DocumentStore], max_batch_size: int = MAX_BATCH_SIZE) -> None:
        super().__init__(store)
        self.max_batch_size = max_batch_size

    # PUBLIC_INTERFACE
    async def clear_financials(
        self,
        options: Optional[ClearOptions] = None,
        strict: bool = False,
    ) -> Optional[ClearSummary]:
        """
        Delete or reset the collections selected by `options`.

        Phases run in order: ledger entries, party payments, activity logs
        (ledger and investment), investment, then orders (deleted when
        clearOrders is set, otherwise their payments reset when
        clearOrderPayments is set). Operations share one batch that is
        committed every `max_batch_size` operations and once more at the end.

        Parameters:
            options: switches to apply; omitted fields keep their defaults.
            strict: raise StoreUnavailableError instead of logging and
                returning None when no store is available.
        Returns:
            ClearSummary, or None when the store is unavailable in lenient mode.
        Raises:
            BatchCommitError: a commit failed; remaining phases were not run.
        """
        if self.store is None:
            if strict:
                raise StoreUnavailableError("Document store not initialized")
            logger.error("Document store not initialized; financial data was not cleared")
            return None

        options = options or ClearOptions()
        writer = BatchWriter(self.store, self.max_batch_size)
        summary = ClearSummary()

        if options.clear_ledger:
            logger.info("Clearing ledger entries...")
            summary.deleted[LEDGER_ENTRIES] = await self._delete_all(writer, LEDGER_ENTRIES)

        if options.clear_party_payments:
            logger.info("Clearing party payments...")
            summary.deleted[PARTY_PAYMENTS] = await self._delete_all(writer, PARTY_PAYMENTS)

        if options.clear_activity_logs:
            logger.info("Clearing ledger activities...")
            summary.deleted[LEDGER_ACTIVITIES] = await self._delete_all(writer, LEDGER_ACTIVITIES)
            logger.info("Clearing investment activities...")
            summary.deleted[INVESTMENT_ACTIVITY] = await self._delete_all(writer, INVESTMENT_ACTIVITY)

        if options.clear_investment:
            logger.info("Clearing investment...")
            summary.deleted[INVESTMENT] = await self._delete_all(writer, INVESTMENT)

        await writer.flush_if_full()

        if options.clear_orders:
            logger.info("Deleting all orders...")
            summary.deleted[ORDERS] = await self._delete_all(writer, ORDERS)
        elif options.clear_order_payments:
            logger.info("Clearing order payments...")
            summary.updated[ORDERS] = await self._reset_order_payments(writer)

        await writer.flush()

        summary.operations = writer.operations
        summary.batch_sizes = list(writer.batch_sizes)
        logger.info(
            "Selected financial data cleared successfully (%d operations in %d batches)",
            summary.operations,
            len(summary.batch_sizes),
        )
        return summary

    async def _delete_all(self, writer: BatchWriter, collection: str) -> int:
        snapshots = await self.store.get_all(collection)
        for snap in snapshots:
            await writer.delete(snap.ref)
        return len(snapshots)

    async def _reset_order_payments(self, writer: BatchWriter) -> int:
        updated = 0
        for snap in await self.store.get_all(ORDERS):
            # Orders without payments or adjustments are left untouched
            if has_payment_state(snap.data):
                await writer.update(snap.ref, _CLEARED_ORDER_PAYMENTS)
                updated += 1
            await writer.flush_if_full()
        return updated
