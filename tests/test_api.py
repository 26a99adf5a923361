"""
HTTP tests for the API routes, run against the in-memory document store.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from orderledger.api.main import app
from orderledger.core.deps import get_document_store
from orderledger.db.store import BatchCommitError, MemoryDocumentStore


def today():
    return datetime.now(timezone.utc).replace(hour=12, minute=0, second=0, microsecond=0).isoformat()


# Fixtures

@pytest.fixture
def store():
    return MemoryDocumentStore({
        "orders": {
            "o1": {
                "orderCode": "RS1",
                "date": today(),
                "partyName": "ABC Construction",
                "material": ["Bodeli"],
                "weight": 20,
                "originalTotal": 1000,
                "additionalCost": 100,
                "profit": 400,
                "expenseAdjustment": -50,
                "partialPayments": [{"amount": 800}],
            },
            "o2": {
                "orderCode": "RS2",
                "date": today(),
                "partyName": "XYZ Builders",
                "material": "Kali",
                "weight": 10,
                "originalTotal": 500,
                "profit": 120,
            },
        },
        "ledgerEntries": {
            "l1": {"type": "credit", "amount": 900, "partyName": "ABC Construction", "date": today()},
            "l2": {"type": "debit", "amount": 800, "supplier": "Shree Quarry", "date": today()},
        },
        "partyPayments": {"p1": {"amount": 900}},
    })


@pytest.fixture
def client(store):
    app.dependency_overrides[get_document_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def offline_client():
    app.dependency_overrides[get_document_store] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_echoes_correlation_id(client):
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
    assert response.status_code == 200
    assert response.json()["message"] == "Healthy"
    assert response.headers["X-Correlation-ID"] == "abc-123"


def test_date_range(client):
    response = client.get("/api/v1/stats/date-range", params={"duration": "7days"})
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"start", "end"}
    assert body["start"] < body["end"]


def test_dashboard(client):
    response = client.get("/api/v1/stats/dashboard", params={"duration": "currentMonth"})
    assert response.status_code == 200
    body = response.json()
    assert body["duration"] == "currentMonth"
    stats = body["stats"]
    assert stats["totalOrders"] == 2
    assert stats["totalProfit"] == 470
    assert stats["estimatedProfit"] == 470
    assert stats["totalCost"] == 1600
    assert stats["paidOrders"] == 1
    assert stats["unpaidOrders"] == 1
    assert stats["customerPaymentsReceived"] == 900
    assert stats["moneyOut"] == 800
    assert stats["calculatedBalance"] == 100


def test_dashboard_filters(client):
    response = client.get("/api/v1/stats/dashboard", params={"party_name": "xyz builders"})
    assert response.status_code == 200
    assert response.json()["stats"]["totalOrders"] == 1


def test_calculate_from_request_body(client):
    payload = {
        "orders": [{"originalTotal": 1000, "partialPayments": [{"amount": 400}], "profit": 100}],
        "ledgerEntries": [
            {"type": "credit", "amount": 500, "partyName": "X"},
            {"type": "debit", "amount": 200},
        ],
    }
    response = client.post("/api/v1/stats/calculate", json=payload)
    assert response.status_code == 200
    stats = response.json()
    assert stats["partialOrders"] == 1
    assert stats["unpaidOrders"] == 1
    assert stats["calculatedBalance"] == 300
    assert stats["rawMaterialPaymentsOutstanding"] == 600


def test_calculate_validation_error_envelope(client):
    response = client.post("/api/v1/stats/calculate", json={"orders": "nope"})
    assert response.status_code == 422
    body = response.json()
    assert body["error"]["type"] == "validation_error"
    assert body["path"] == "/api/v1/stats/calculate"


def test_order_profit(client):
    response = client.get("/api/v1/orders/o1/profit")
    assert response.status_code == 200
    body = response.json()
    assert body["adjustedProfit"] == 350
    assert body["hasAdjustments"] is True
    assert body["paymentStatus"] == "paid"
    assert body["rawMaterialOutstanding"] == 200


def test_missing_order_is_404(client):
    response = client.get("/api/v1/orders/nope/profit")
    assert response.status_code == 404
    body = response.json()
    assert body["error"]["type"] == "http_error"
    assert body["error"]["message"] == "Order not found"


def test_list_orders_with_material_filter(client):
    response = client.get("/api/v1/orders", params={"material": "bode"})
    assert response.status_code == 200
    assert [row["orderCode"] for row in response.json()] == ["RS1"]


def test_clear_financials_with_partial_options(client, store):
    response = client.post("/api/v1/maintenance/clear-financials", json={"clearLedger": False})
    assert response.status_code == 200
    body = response.json()
    assert body["deleted"] == {
        "partyPayments": 1,
        "ledgerActivities": 0,
        "investmentActivity": 0,
        "investment": 0,
    }
    assert body["updated"] == {"orders": 1}
    assert body["batchSizes"] == [2]
    assert set(store.documents("ledgerEntries")) == {"l1", "l2"}
    assert store.documents("orders")["o1"]["partialPayments"] == []


def test_clear_financials_without_body_uses_defaults(client, store):
    response = client.post("/api/v1/maintenance/clear-financials")
    assert response.status_code == 200
    assert store.documents("ledgerEntries") == {}
    assert set(store.documents("orders")) == {"o1", "o2"}


def test_commit_failure_is_reported(store):
    class FailingStore(MemoryDocumentStore):
        def _apply(self, ops):
            raise BatchCommitError("disk full", len(ops))

    failing = FailingStore({"ledgerEntries": store.documents("ledgerEntries")})
    app.dependency_overrides[get_document_store] = lambda: failing
    try:
        response = TestClient(app).post("/api/v1/maintenance/clear-financials")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["type"] == "batch_commit_failed"
    assert body["error"]["details"] == {"operations": 2}


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/v1/stats/dashboard"),
        ("get", "/api/v1/orders"),
        ("post", "/api/v1/maintenance/clear-financials"),
    ],
)
def test_unavailable_store_is_503(offline_client, method, path):
    response = getattr(offline_client, method)(path)
    assert response.status_code == 503
    assert response.json()["error"]["type"] == "store_unavailable"


def test_pure_endpoints_work_without_store(offline_client):
    assert offline_client.get("/api/v1/stats/date-range").status_code == 200
    assert offline_client.post("/api/v1/stats/calculate", json={"orders": []}).status_code == 200


def test_order_statement_csv(client):
    response = client.get("/api/v1/reports/order-statement", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("order_code,date,party_name")
    assert len(lines) == 3


def test_ledger_report_csv(client):
    response = client.get("/api/v1/reports/ledger")
    assert response.status_code == 200
    lines = response.text.strip().splitlines()
    assert lines[0] == "date,type,amount,party_name,supplier,source,note"
    assert len(lines) == 3


def test_ledger_report_lists_undated_entries_last(store):
    entries = store.documents("ledgerEntries")
    entries["l3"] = {"type": "debit", "amount": 50, "supplier": "Shree Quarry", "date": "not a date"}
    entries["l4"] = {"type": "credit", "amount": 25}
    undated = MemoryDocumentStore({"ledgerEntries": entries})
    app.dependency_overrides[get_document_store] = lambda: undated
    try:
        response = TestClient(app).get("/api/v1/reports/ledger")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    rows = response.text.strip().splitlines()[1:]
    assert len(rows) == 4
    assert rows[2].startswith(",debit,50")
    assert rows[3].startswith(",credit,25")


@pytest.mark.parametrize(
    "export_format, media_type, magic",
    [
        ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", b"PK"),
        ("pdf", "application/pdf", b"%PDF"),
    ],
)
def test_order_statement_binary_formats(client, export_format, media_type, magic):
    response = client.get("/api/v1/reports/order-statement", params={"format": export_format})
    assert response.status_code == 200
    assert response.headers["content-type"] == media_type
    assert response.content.startswith(magic)
    assert f'order_statement.{export_format}"' in response.headers["content-disposition"]
