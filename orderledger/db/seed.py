"""
Demo data seeding.

Seeds, for each of the last few months:
- 3-5 orders with random parties, sites, materials and trucks
- raw-material payments on some orders (none, part, or in full)
- matching ledger entries: supplier debits and party credits

Usage:
  python -m orderledger.db.run_migrations upgrade head
  python -m orderledger.db.seed
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from orderledger.db.collection_names import LEDGER_ENTRIES, ORDERS
from orderledger.db.store import DocumentStore
from orderledger.services.maintenance import BatchWriter

logger = logging.getLogger(__name__)

PARTY_SITES = {
    "ABC Construction": ["Site A - Downtown", "Site B - Industrial Area", "Site C - Residential"],
    "XYZ Builders": ["Main Project Site", "Extension Site", "Renovation Site"],
    "Premier Developers": ["Tower A", "Tower B", "Commercial Complex"],
}
MATERIALS = ["Bodeli", "Panetha", "Nareshware", "Kali", "Chikhli Kapchi VSI", "Chikhli Kapchi", "Areth"]
TRUCK_OWNERS = ["Rajesh Transport", "Sharma Logistics", "Patel Trucks", "Singh Haulage", "Kumar Freight"]
TRUCK_NUMBERS = ["GJ-01-AB-1234", "GJ-02-CD-5678", "GJ-03-EF-9012", "GJ-04-GH-3456", "GJ-05-IJ-7890"]
SUPPLIERS = ["Shree Quarry", "Om Stone Works"]


def _month_start(now: datetime, months_back: int) -> datetime:
    index = now.year * 12 + now.month - 1 - months_back
    return datetime(index // 12, index % 12 + 1, 1, 12, tzinfo=timezone.utc)


# PUBLIC_INTERFACE
def build_demo_documents(
    months: int = 6,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Generate demo orders and ledger entries as plain documents keyed by collection.

    Every document carries its `id`. Amounts follow the stored-field rules:
    total = weight * rate, originalTotal = originalWeight * originalRate,
    profit = total - originalTotal - additionalCost.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    orders: List[Dict[str, Any]] = []
    ledger: List[Dict[str, Any]] = []

    for months_back in range(months):
        month = _month_start(now, months_back)
        for _ in range(rng.randint(3, 5)):
            code = f"RS{len(orders) + 1}"
            when = month.replace(day=rng.randint(1, 28)).isoformat()
            party = rng.choice(list(PARTY_SITES))
            supplier = rng.choice(SUPPLIERS)

            weight = rng.randint(10, 59)
            rate = rng.randint(500, 999)
            original_weight = weight + rng.randint(-2, 2)
            original_rate = rate - rng.randint(0, 99)
            total = weight * rate
            original_total = original_weight * original_rate
            additional_cost = rng.randint(1000, 5999)

            roll = rng.random()
            if roll < 0.3:
                paid_amounts = [original_total]
            elif roll < 0.6:
                paid_amounts = [round(original_total * 0.5)]
            else:
                paid_amounts = []

            payments = []
            for n, amount in enumerate(paid_amounts, start=1):
                ledger_id = f"{code}-pay{n}"
                payments.append({"id": ledger_id, "amount": amount, "date": when, "ledgerEntryId": ledger_id})
                ledger.append({
                    "id": ledger_id,
                    "type": "debit",
                    "amount": amount,
                    "date": when,
                    "source": "orderExpense",
                    "supplier": supplier,
                    "note": f"Raw material for {code}",
                })

            if rng.random() < 0.5:
                ledger.append({
                    "id": f"{code}-receipt",
                    "type": "credit",
                    "amount": total,
                    "date": when,
                    "source": "partyPayment",
                    "partyName": party,
                })

            orders.append({
                "id": code,
                "orderCode": code,
                "date": when,
                "partyName": party,
                "siteName": rng.choice(PARTY_SITES[party]),
                "material": rng.sample(MATERIALS, rng.randint(1, 3)),
                "weight": weight,
                "rate": rate,
                "total": total,
                "truckOwner": rng.choice(TRUCK_OWNERS),
                "truckNo": rng.choice(TRUCK_NUMBERS),
                "supplier": supplier,
                "originalWeight": original_weight,
                "originalRate": original_rate,
                "originalTotal": original_total,
                "additionalCost": additional_cost,
                "profit": total - original_total - additional_cost,
                "partialPayments": payments,
                "customerPayments": [],
                "invoiced": False,
                "archived": False,
                "createdAt": now.isoformat(),
            })

    return {ORDERS: orders, LEDGER_ENTRIES: ledger}


# PUBLIC_INTERFACE
async def seed_all(store: DocumentStore, months: int = 6, seed: Optional[int] = None) -> int:
    """
    Write demo documents to the store in size-bounded batches.

    Returns the number of documents written.
    """
    documents = build_demo_documents(months, random.Random(seed))
    writer = BatchWriter(store)
    for collection, docs in documents.items():
        for doc in docs:
            data = {key: value for key, value in doc.items() if key != "id"}
            await writer.set(store.ref(collection, doc["id"]), data)
    await writer.flush()
    logger.info(
        "Seeded %d orders and %d ledger entries",
        len(documents[ORDERS]),
        len(documents[LEDGER_ENTRIES]),
    )
    return writer.operations


async def _main() -> None:
    from orderledger.core.logging import configure_logging
    from orderledger.db.session import open_document_store

    configure_logging()
    store, engine = open_document_store("postgres")
    if store is None:
        raise SystemExit(1)
    try:
        await seed_all(store)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(_main())
