from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError

from orderledger.db.collection_names import ORDERS
from orderledger.schemas.orders import Order
from .base import BaseRepository

logger = logging.getLogger(__name__)


class OrderRepository(BaseRepository):
    """Repository for orders."""

    collection = ORDERS

    async def list_orders(self) -> List[Order]:
        orders: List[Order] = []
        for record in await self.records():
            try:
                orders.append(Order.model_validate(record))
            except ValidationError:
                logger.warning("Skipping malformed order document %s", record.get("id"))
        return orders

    async def get_order(self, order_id: str) -> Optional[Order]:
        for order in await self.list_orders():
            if order.id == order_id:
                return order
        return None
