from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional, Union

from orderledger.repositories.ledger import LedgerRepository
from orderledger.repositories.orders import OrderRepository
from orderledger.schemas.ledger import LedgerEntry
from orderledger.schemas.orders import Order, OrderFilters, OrderProfitRead, PaymentStatus
from orderledger.schemas.stats import DashboardRead, DashboardStats, DateRange
from orderledger.services.base import BaseService
from orderledger.services.profit import OrderLike, as_order, get_adjusted_profit, has_profit_adjustments

logger = logging.getLogger(__name__)

# Absolute shortfall (currency units) within which an order still counts as paid
PAYMENT_TOLERANCE = 250

DURATION_TAGS = ("7days", "lastMonth", "last3Months", "last6Months", "lastYear", "currentMonth")
DEFAULT_DURATION = "currentMonth"

LedgerLike = Union[LedgerEntry, Mapping[str, Any]]


def _as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _in_range(moment: Optional[datetime], start: Optional[datetime], end: Optional[datetime]) -> bool:
    # An undated record cannot be shown to fall outside the bounds.
    if moment is None:
        return True
    moment = _as_utc(moment)
    if start is not None and moment < _as_utc(start):
        return False
    if end is not None and moment > _as_utc(end):
        return False
    return True


# PUBLIC_INTERFACE
def raw_material_paid(order: OrderLike) -> float:
    """Sum of the payments made for the order's raw material."""
    order = as_order(order)
    return sum(payment.amount for payment in order.partial_payments)


# PUBLIC_INTERFACE
def classify_payment(order: OrderLike) -> PaymentStatus:
    """
    Raw-material payment status of an order.

    paid:    payments reach originalTotal minus PAYMENT_TOLERANCE, and originalTotal > 0
    partial: some payment made, but short of that
    unpaid:  no payment at all
    """
    order = as_order(order)
    paid = raw_material_paid(order)
    if paid >= order.original_total - PAYMENT_TOLERANCE and order.original_total > 0:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


# PUBLIC_INTERFACE
def order_profit(order: OrderLike) -> OrderProfitRead:
    """Build the reconciliation view of a single order."""
    order = as_order(order)
    paid = raw_material_paid(order)
    return OrderProfitRead(
        id=order.id,
        order_code=order.order_code,
        date=order.date,
        party_name=order.party_name,
        truck_no=order.truck_no,
        profit=order.profit,
        adjusted_profit=get_adjusted_profit(order),
        has_adjustments=has_profit_adjustments(order),
        raw_material_paid=paid,
        raw_material_outstanding=max(0.0, order.original_total - paid),
        payment_status=classify_payment(order),
    )


# PUBLIC_INTERFACE
def calculate_stats(
    orders: Iterable[OrderLike],
    ledger_entries: Optional[Iterable[LedgerLike]] = None,
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
) -> DashboardStats:
    """
    Aggregate orders and (optionally) ledger entries into dashboard statistics.

    Orders are folded unconditionally; the date window applies only to the
    ledger entries. When `ledger_entries` is None the ledger-derived fields
    (customerPaymentsReceived, moneyOut, calculatedBalance) stay 0.
    """
    orders = [as_order(order) for order in orders]
    stats = DashboardStats(total_orders=len(orders))

    for order in orders:
        stats.total_weight += order.weight

        order_cost = order.original_total + order.additional_cost
        stats.total_cost += order_cost
        stats.cost_amount += order_cost

        adjusted = get_adjusted_profit(order)
        stats.total_profit += adjusted
        stats.estimated_profit += adjusted

        # partialPayments are payments made OUT for raw material
        paid = raw_material_paid(order)
        stats.raw_material_payments_received += paid
        stats.raw_material_payments_outstanding += max(0.0, order.original_total - paid)

        status = classify_payment(order)
        if status is PaymentStatus.PAID:
            stats.paid_orders += 1
        elif status is PaymentStatus.PARTIAL:
            # partial orders are reported in both buckets
            stats.partial_orders += 1
            stats.unpaid_orders += 1
        else:
            stats.unpaid_orders += 1

    if ledger_entries is not None:
        total_income = 0.0
        income_with_party = 0.0
        expenses = 0.0
        for raw in ledger_entries:
            entry = raw if isinstance(raw, LedgerEntry) else LedgerEntry.model_validate(raw)
            if not _in_range(entry.date, range_start, range_end):
                continue
            if entry.type == "credit":
                total_income += entry.amount
                if entry.party_name and entry.party_name.strip():
                    income_with_party += entry.amount
            elif entry.type == "debit":
                expenses += entry.amount

        stats.customer_payments_received = income_with_party
        stats.money_out = expenses
        stats.calculated_balance = income_with_party - expenses
        logger.debug(
            "Ledger pass: income=%.2f with_party=%.2f expenses=%.2f",
            total_income,
            income_with_party,
            expenses,
        )

    return stats


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move by whole months, clamping the day to the target month's length."""
    years, month_index = divmod(moment.month - 1 + months, 12)
    year = moment.year + years
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _end_of_month(moment: datetime) -> datetime:
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    return moment.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)


def _start_of_year(moment: datetime) -> datetime:
    return moment.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)


# PUBLIC_INTERFACE
def get_date_range_for_duration(duration: Optional[str] = None, now: Optional[datetime] = None) -> DateRange:
    """
    Map a duration tag to a calendar window relative to `now` (UTC).

    Tags:
      7days        -> [now - 7 days, now]
      lastMonth    -> the whole previous calendar month
      last3Months  -> [now - 3 months, now]
      last6Months  -> [now - 6 months, now]
      lastYear     -> [start of the year 12 months ago, now - 12 months]
      currentMonth -> the whole current calendar month (also any unknown tag)
    """
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    end = now

    if duration == "7days":
        start = now - timedelta(days=7)
    elif duration == "lastMonth":
        previous = _shift_months(now, -1)
        start = _start_of_month(previous)
        end = _end_of_month(previous)
    elif duration == "last3Months":
        start = _shift_months(now, -3)
    elif duration == "last6Months":
        start = _shift_months(now, -6)
    elif duration == "lastYear":
        # TODO: confirm with product whether this should be the previous calendar year
        year_ago = _shift_months(now, -12)
        start = _start_of_year(year_ago)
        end = year_ago
    else:
        start = _start_of_month(now)
        end = _end_of_month(now)

    return DateRange(start=start, end=end)


def _split_terms(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [term.strip().lower() for term in value.split(",") if term.strip()]


# PUBLIC_INTERFACE
def filter_orders(
    orders: Iterable[Order],
    filters: Optional[OrderFilters] = None,
    date_range: Optional[DateRange] = None,
) -> List[Order]:
    """
    Select the orders shown on the dashboard.

    A duration window keeps only dated orders inside it. Party names match
    exactly (case-insensitive) against any listed name; materials match when a
    listed fragment occurs in any of the order's materials. Explicit start/end
    dates are inclusive and, like the window, drop undated orders.
    """
    selected = list(orders)

    if date_range is not None:
        selected = [
            order for order in selected
            if order.date is not None and _in_range(order.date, date_range.start, date_range.end)
        ]

    if filters is None:
        return selected

    parties = _split_terms(filters.party_name)
    if parties:
        selected = [order for order in selected if order.party_name.lower() in parties]

    materials = _split_terms(filters.material)
    if materials:
        selected = [
            order for order in selected
            if any(fragment in material.lower() for fragment in materials for material in order.materials)
        ]

    if filters.start_date or filters.end_date:
        selected = [
            order for order in selected
            if order.date is not None and _in_range(order.date, filters.start_date, filters.end_date)
        ]

    return selected


class DashboardService(BaseService):
    """
    Loads orders and ledger entries from the store and computes dashboard data.
    """

    # PUBLIC_INTERFACE
    async def dashboard(
        self,
        duration: Optional[str] = None,
        filters: Optional[OrderFilters] = None,
        now: Optional[datetime] = None,
    ) -> DashboardRead:
        """
        Compute statistics for the orders in the duration window.

        The same window filters the ledger entries. Unknown tags fall back to
        the current month.
        """
        store = self.require_store()
        tag = duration if duration in DURATION_TAGS else DEFAULT_DURATION
        window = get_date_range_for_duration(tag, now)

        orders = await OrderRepository(store).list_orders()
        entries = await LedgerRepository(store).list_entries()
        selected = filter_orders(orders, filters, window)

        stats = calculate_stats(selected, entries, window.start, window.end)
        logger.info(
            "Dashboard %s: %d of %d orders, %d ledger entries",
            tag,
            len(selected),
            len(orders),
            len(entries),
        )
        return DashboardRead(duration=tag, range=window, stats=stats)

    # PUBLIC_INTERFACE
    async def order_profits(
        self,
        filters: Optional[OrderFilters] = None,
        duration: Optional[str] = None,
    ) -> List[OrderProfitRead]:
        """Reconciliation rows for the filtered orders; no window when duration is None."""
        store = self.require_store()
        window = get_date_range_for_duration(duration) if duration else None
        orders = await OrderRepository(store).list_orders()
        return [order_profit(order) for order in filter_orders(orders, filters, window)]

    # PUBLIC_INTERFACE
    async def get_order_profit(self, order_id: str) -> Optional[OrderProfitRead]:
        """Reconciliation view of one order, or None if it does not exist."""
        order = await OrderRepository(self.require_store()).get_order(order_id)
        if order is None:
            return None
        return order_profit(order)
