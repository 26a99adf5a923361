from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import CamelModel
from .ledger import LedgerEntry
from .orders import Order


class DashboardStats(CamelModel):
    """
    Aggregate snapshot over a set of orders and ledger entries.

    Field notes:
      - totalCost and costAmount carry the same value (originalTotal + additionalCost).
      - totalProfit and estimatedProfit carry the same value (sum of adjusted profit).
      - rawMaterialPaymentsReceived is money paid OUT for raw material; the name
        is kept for compatibility with existing dashboards.
      - partialOrders is a subset marker: partial orders are also counted in unpaidOrders.
      - currentBalance, paymentReceived and profitReceived are filled by other
        collaborators and stay 0 here.
    """
    total_weight: float = Field(default=0.0)
    total_cost: float = Field(default=0.0)
    total_profit: float = Field(default=0.0)
    current_balance: float = Field(default=0.0)
    total_orders: int = Field(default=0)
    paid_orders: int = Field(default=0)
    unpaid_orders: int = Field(default=0)
    partial_orders: int = Field(default=0)
    estimated_profit: float = Field(default=0.0)
    payment_received: float = Field(default=0.0)
    cost_amount: float = Field(default=0.0)
    money_out: float = Field(default=0.0, description="Sum of in-range debit ledger entries")
    raw_material_payments_outstanding: float = Field(default=0.0)
    customer_payments_received: float = Field(default=0.0, description="In-range credits with a party name")
    raw_material_payments_received: float = Field(default=0.0, description="Payments made OUT for raw material")
    profit_received: float = Field(default=0.0)
    calculated_balance: float = Field(default=0.0, description="customerPaymentsReceived - moneyOut")


class DateRange(BaseModel):
    """Inclusive time window."""
    start: datetime = Field(..., description="Window start (inclusive)")
    end: datetime = Field(..., description="Window end (inclusive)")


class DashboardRead(BaseModel):
    """Dashboard payload: the window used and the statistics computed over it."""
    duration: str = Field(..., description="Duration tag that produced the window")
    range: DateRange = Field(...)
    stats: DashboardStats = Field(...)


class StatsCalculateRequest(CamelModel):
    """Orders and optional ledger entries supplied by the caller."""
    orders: List[Order] = Field(default_factory=list)
    ledger_entries: Optional[List[LedgerEntry]] = Field(default=None)
    range_start: Optional[datetime] = Field(default=None)
    range_end: Optional[datetime] = Field(default=None)
