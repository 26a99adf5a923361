from __future__ import annotations

from typing import Any, Mapping, Union

from orderledger.schemas.orders import Order

OrderLike = Union[Order, Mapping[str, Any]]


def as_order(order: OrderLike) -> Order:
    """Validate a raw order document into an Order; Order instances pass through."""
    if isinstance(order, Order):
        return order
    return Order.model_validate(order)


# PUBLIC_INTERFACE
def get_adjusted_profit(order: OrderLike) -> float:
    """
    Return the order's profit after expense, revenue and manual adjustments.

    The three terms are summed onto the stored baseline profit unconditionally:
    expenseAdjustment is expected to be zero or negative, revenueAdjustment and
    adjustmentAmount zero or positive, but no sign is enforced. Missing terms
    count as zero.
    """
    order = as_order(order)
    return (
        order.profit
        + order.expense_adjustment
        + order.revenue_adjustment
        + order.adjustment_amount
    )


# PUBLIC_INTERFACE
def has_profit_adjustments(order: OrderLike) -> bool:
    """True if any of the three adjustment terms is non-zero."""
    order = as_order(order)
    return (
        order.expense_adjustment != 0
        or order.revenue_adjustment != 0
        or order.adjustment_amount != 0
    )
