from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError

from orderledger.db.collection_names import LEDGER_ENTRIES
from orderledger.schemas.ledger import LedgerEntry
from .base import BaseRepository

logger = logging.getLogger(__name__)


class LedgerRepository(BaseRepository):
    """Repository for ledger entries."""

    collection = LEDGER_ENTRIES

    async def list_entries(self) -> List[LedgerEntry]:
        entries: List[LedgerEntry] = []
        for record in await self.records():
            try:
                entries.append(LedgerEntry.model_validate(record))
            except ValidationError:
                logger.warning("Skipping malformed ledger entry %s", record.get("id"))
        return entries
