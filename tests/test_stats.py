"""
Unit tests for dashboard statistics, duration windows and order filtering.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from orderledger.db.store import MemoryDocumentStore, StoreUnavailableError
from orderledger.schemas.orders import Order, OrderFilters, PaymentStatus
from orderledger.services.stats import (
    DashboardService,
    calculate_stats,
    classify_payment,
    filter_orders,
    get_date_range_for_duration,
    order_profit,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def make_order(original_total=1000, payments=(), **fields):
    data = {
        "originalTotal": original_total,
        "partialPayments": [{"amount": amount} for amount in payments],
    }
    data.update(fields)
    return data


# Fixtures

@pytest.fixture
def classified_orders():
    """One paid, one partial and one unpaid order against originalTotal=1000."""
    return [
        make_order(payments=[500, 300], weight=10, additionalCost=100, profit=50),
        make_order(payments=[400], weight=20, additionalCost=0, profit=70, adjustmentAmount=30),
        make_order(payments=[], weight=5.5, additionalCost=50, profit=-10),
    ]


@pytest.fixture
def now():
    return utc(2024, 3, 31, 10, 0)


class TestPaymentClassification:
    def test_within_tolerance_is_paid(self):
        assert classify_payment(make_order(payments=[800])) is PaymentStatus.PAID
        assert classify_payment(make_order(payments=[750])) is PaymentStatus.PAID

    def test_short_of_tolerance_is_partial(self):
        assert classify_payment(make_order(payments=[749.99])) is PaymentStatus.PARTIAL
        assert classify_payment(make_order(payments=[400])) is PaymentStatus.PARTIAL

    def test_no_payment_is_unpaid(self):
        assert classify_payment(make_order(payments=[])) is PaymentStatus.UNPAID

    def test_zero_original_total_is_never_paid(self):
        assert classify_payment(make_order(original_total=0)) is PaymentStatus.UNPAID
        assert classify_payment(make_order(original_total=0, payments=[100])) is PaymentStatus.PARTIAL

    def test_order_profit_view(self):
        view = order_profit(make_order(payments=[400], profit=100, expenseAdjustment=-20, orderCode="RS7"))
        assert view.order_code == "RS7"
        assert view.adjusted_profit == 80
        assert view.has_adjustments is True
        assert view.raw_material_paid == 400
        assert view.raw_material_outstanding == 600
        assert view.payment_status is PaymentStatus.PARTIAL


class TestCalculateStats:
    def test_counts_and_dual_partial_classification(self, classified_orders):
        stats = calculate_stats(classified_orders)
        assert stats.total_orders == 3
        assert stats.paid_orders == 1
        assert stats.partial_orders == 1
        assert stats.unpaid_orders == 2

    def test_order_sums(self, classified_orders):
        stats = calculate_stats(classified_orders)
        assert stats.total_weight == pytest.approx(35.5)
        assert stats.total_cost == 3150
        assert stats.total_profit == 140
        assert stats.raw_material_payments_received == 1200
        assert stats.raw_material_payments_outstanding == 1800

    def test_duplicated_fields_match(self, classified_orders):
        stats = calculate_stats(classified_orders)
        assert stats.cost_amount == stats.total_cost
        assert stats.estimated_profit == stats.total_profit

    def test_overpayment_does_not_go_negative(self):
        stats = calculate_stats([make_order(payments=[1200])])
        assert stats.raw_material_payments_outstanding == 0
        assert stats.raw_material_payments_received == 1200

    def test_ledger_fields_stay_zero_without_entries(self, classified_orders):
        stats = calculate_stats(classified_orders)
        assert stats.customer_payments_received == 0
        assert stats.money_out == 0
        assert stats.calculated_balance == 0

    def test_untouched_fields_stay_zero(self, classified_orders):
        stats = calculate_stats(classified_orders, [{"type": "credit", "amount": 10, "partyName": "X"}])
        assert stats.current_balance == 0
        assert stats.payment_received == 0
        assert stats.profit_received == 0

    def test_ledger_balance(self):
        entries = [
            {"type": "credit", "amount": 500, "partyName": "X"},
            {"type": "debit", "amount": 200, "supplier": "Quarry"},
        ]
        stats = calculate_stats([], entries)
        assert stats.customer_payments_received == 500
        assert stats.money_out == 200
        assert stats.calculated_balance == 300

    def test_credit_without_party_is_not_a_customer_payment(self):
        entries = [
            {"type": "credit", "amount": 500, "partyName": "X"},
            {"type": "credit", "amount": 90, "partyName": "   "},
            {"type": "credit", "amount": 60},
        ]
        stats = calculate_stats([], entries)
        assert stats.customer_payments_received == 500
        assert stats.calculated_balance == 500

    def test_range_bounds_are_inclusive(self):
        start, end = utc(2024, 3, 1), utc(2024, 3, 31, 23, 59, 59)
        entries = [
            {"type": "credit", "amount": 100, "partyName": "X", "date": "2024-03-01T00:00:00Z"},
            {"type": "debit", "amount": 40, "date": "2024-03-31T23:59:59Z"},
            {"type": "credit", "amount": 999, "partyName": "X", "date": "2024-02-29T23:59:59Z"},
            {"type": "debit", "amount": 999, "date": "2024-04-01T00:00:00Z"},
        ]
        stats = calculate_stats([], entries, start, end)
        assert stats.customer_payments_received == 100
        assert stats.money_out == 40
        assert stats.calculated_balance == 60

    def test_range_does_not_filter_orders(self, classified_orders):
        dated = [dict(order, date="2020-01-01") for order in classified_orders]
        stats = calculate_stats(dated, [], utc(2024, 3, 1), utc(2024, 3, 31))
        assert stats.total_orders == 3

    def test_messy_documents_do_not_produce_nan(self):
        orders = [{"originalTotal": "abc", "weight": None, "profit": float("nan"), "partialPayments": None}]
        stats = calculate_stats(orders, [{"type": "debit", "amount": "12"}])
        assert stats.total_weight == 0
        assert stats.total_profit == 0
        assert stats.unpaid_orders == 1
        assert stats.money_out == 12

    def test_loosely_typed_fields_do_not_drop_orders(self):
        orders = [
            {
                "originalTotal": 1000,
                "profit": 100,
                "challanNo": "",
                "paidAmount": "n/a",
                "paid": "yes",
                "material": ["Kali", 12, None],
                "partialPayments": [
                    {"amount": 600, "date": "05/03/2024", "createdAt": "yesterday"},
                    "stray",
                ],
            }
        ]
        stats = calculate_stats(orders)
        assert stats.total_orders == 1
        assert stats.total_profit == 100
        assert stats.raw_material_payments_received == 600
        assert stats.partial_orders == 1

    def test_unknown_ledger_types_are_ignored(self):
        entries = [
            {"type": "credit", "amount": 500, "partyName": "X", "date": "03/05/2024"},
            {"type": "refund", "amount": 70},
            {"amount": 30},
        ]
        stats = calculate_stats([], entries, utc(2024, 3, 1), utc(2024, 3, 31))
        # an unreadable date counts as undated
        assert stats.customer_payments_received == 500
        assert stats.money_out == 0


class TestDateRange:
    def test_seven_days(self, now):
        window = get_date_range_for_duration("7days", now)
        assert window.start == utc(2024, 3, 24, 10, 0)
        assert window.end == now

    def test_last_month_clamps_day(self, now):
        window = get_date_range_for_duration("lastMonth", now)
        assert window.start == utc(2024, 2, 1)
        assert window.end == utc(2024, 2, 29, 23, 59, 59, 999999)

    def test_last_month_across_year_boundary(self):
        window = get_date_range_for_duration("lastMonth", utc(2024, 1, 15, 8, 0))
        assert window.start == utc(2023, 12, 1)
        assert window.end == utc(2023, 12, 31, 23, 59, 59, 999999)

    def test_last_three_and_six_months(self, now):
        assert get_date_range_for_duration("last3Months", now).start == utc(2023, 12, 31, 10, 0)
        six = get_date_range_for_duration("last6Months", now)
        assert six.start == utc(2023, 9, 30, 10, 0)
        assert six.end == now

    def test_last_year_is_anchored_twelve_months_back(self, now):
        window = get_date_range_for_duration("lastYear", now)
        assert window.start == utc(2023, 1, 1)
        assert window.end == utc(2023, 3, 31, 10, 0)

    def test_current_month(self, now):
        window = get_date_range_for_duration("currentMonth", now)
        assert window.start == utc(2024, 3, 1)
        assert window.end == utc(2024, 3, 31, 23, 59, 59, 999999)

    @pytest.mark.parametrize("tag", [None, "", "fortnight", "LASTMONTH"])
    def test_unknown_tags_fall_back_to_current_month(self, now, tag):
        assert get_date_range_for_duration(tag, now) == get_date_range_for_duration("currentMonth", now)

    def test_naive_now_is_treated_as_utc(self):
        window = get_date_range_for_duration("7days", datetime(2024, 3, 31, 10, 0))
        assert window.end == utc(2024, 3, 31, 10, 0)


class TestFilterOrders:
    @pytest.fixture
    def orders(self):
        return [
            Order(id="1", party_name="ABC Construction", material=["Bodeli", "Chikhli Kapchi"], date="2024-03-05"),
            Order(id="2", party_name="XYZ Builders", material="Kali", date="2024-03-20T12:00:00Z"),
            Order(id="3", party_name="ABC Construction", material=["Areth"], date="2024-02-10"),
            Order(id="4", party_name="Premier Developers", material=["Panetha"]),
        ]

    def ids(self, orders):
        return [order.id for order in orders]

    def test_window_drops_undated_orders(self, orders, now):
        window = get_date_range_for_duration("currentMonth", now)
        assert self.ids(filter_orders(orders, None, window)) == ["1", "2"]

    def test_party_names_match_exactly(self, orders):
        assert self.ids(filter_orders(orders, OrderFilters(party_name="abc construction"))) == ["1", "3"]
        assert filter_orders(orders, OrderFilters(party_name="ABC")) == []
        assert self.ids(filter_orders(orders, OrderFilters(party_name="XYZ Builders, Premier Developers"))) == ["2", "4"]

    def test_material_fragments(self, orders):
        assert self.ids(filter_orders(orders, OrderFilters(material="kapchi"))) == ["1"]
        assert self.ids(filter_orders(orders, OrderFilters(material="kali,areth"))) == ["2", "3"]

    def test_explicit_dates_are_inclusive(self, orders):
        filters = OrderFilters(start_date=utc(2024, 3, 5), end_date=utc(2024, 3, 20, 12, 0))
        assert self.ids(filter_orders(orders, filters)) == ["1", "2"]


class TestDashboardService:
    @pytest.fixture
    def store(self):
        return MemoryDocumentStore({
            "orders": {
                "a": make_order(payments=[1000], date="2024-03-02", partyName="X", profit=100),
                "b": make_order(payments=[], date="2024-03-10", partyName="Y", profit=40),
                "c": make_order(payments=[], date="2023-11-10", partyName="X", profit=500),
            },
            "ledgerEntries": {
                "l1": {"type": "credit", "amount": 700, "partyName": "X", "date": "2024-03-03"},
                "l2": {"type": "debit", "amount": 1000, "date": "2024-03-02"},
                "l3": {"type": "credit", "amount": 5000, "partyName": "X", "date": "2023-11-11"},
            },
        })

    def test_dashboard_uses_one_window(self, store, now):
        result = asyncio.run(DashboardService(store).dashboard("currentMonth", None, now))
        assert result.duration == "currentMonth"
        assert result.range.start == utc(2024, 3, 1)
        assert result.stats.total_orders == 2
        assert result.stats.total_profit == 140
        assert result.stats.paid_orders == 1
        assert result.stats.customer_payments_received == 700
        assert result.stats.money_out == 1000
        assert result.stats.calculated_balance == -300

    def test_dashboard_unknown_tag(self, store, now):
        result = asyncio.run(DashboardService(store).dashboard("bogus", None, now))
        assert result.duration == "currentMonth"

    def test_dashboard_with_party_filter(self, store, now):
        result = asyncio.run(
            DashboardService(store).dashboard("last6Months", OrderFilters(party_name="X"), now)
        )
        assert result.stats.total_orders == 2
        assert result.stats.total_profit == 600

    def test_loosely_typed_orders_are_counted(self, store, now):
        orders = store.documents("orders")
        orders["d"] = make_order(
            date="2024-03-20",
            partyName="Z",
            profit=60,
            challanNo="",
            partialPayments=[{"amount": 1000, "date": "05/03/2024"}],
        )
        store = MemoryDocumentStore({"orders": orders})
        result = asyncio.run(DashboardService(store).dashboard("currentMonth", None, now))
        assert result.stats.total_orders == 3
        assert result.stats.total_profit == 200
        assert result.stats.paid_orders == 2

    def test_get_order_profit(self, store):
        service = DashboardService(store)
        view = asyncio.run(service.get_order_profit("a"))
        assert view.payment_status is PaymentStatus.PAID
        assert asyncio.run(service.get_order_profit("missing")) is None

    def test_missing_store_raises(self):
        with pytest.raises(StoreUnavailableError):
            asyncio.run(DashboardService(None).dashboard())
