from __future__ import annotations

from typing import Dict, List

from pydantic import Field

from .common import CamelModel


class ClearOptions(CamelModel):
    """
    Switches selecting what a financial maintenance sweep clears.

    Fields left out of a request keep their defaults, which wipe all financial
    history while preserving the order shipment records themselves.
    """
    clear_orders: bool = Field(default=False, description="Delete every order (takes precedence over clearOrderPayments)")
    clear_investment: bool = Field(default=True, description="Delete the investment collection")
    clear_ledger: bool = Field(default=True, description="Delete every ledger entry")
    clear_activity_logs: bool = Field(default=True, description="Delete ledger and investment activity logs")
    clear_party_payments: bool = Field(default=True, description="Delete every party payment")
    clear_order_payments: bool = Field(
        default=True,
        description="Reset partialPayments, customerPayments and adjustmentAmount on orders that carry any",
    )


class ClearSummary(CamelModel):
    """What a maintenance sweep staged and committed."""
    deleted: Dict[str, int] = Field(default_factory=dict, description="Deleted documents per collection")
    updated: Dict[str, int] = Field(default_factory=dict, description="Updated documents per collection")
    operations: int = Field(default=0, description="Total staged operations")
    batch_sizes: List[int] = Field(default_factory=list, description="Sizes of the committed batches, in order")
