from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from main import app
from app.models.garage import utc_today
from app.routers.reports import get_store
from app.services.garage_store import GarageDataStore


TODAY = utc_today()


class InMemoryStore(GarageDataStore):
    """Garage store backed by in-memory documents instead of Supabase"""

    def __init__(self, tables):
        super().__init__(client=object(), ttl_seconds=300)
        self.tables = tables
        self.fetches = 0

    def _fetch_documents(self, table_name):
        self.fetches += 1
        return self.tables.get(table_name, [])


@pytest.fixture
def store():
    recent = (TODAY - timedelta(days=2)).isoformat()
    return InMemoryStore({
        "estimates": [
            {
                "id": "e1", "date": recent, "status": "COMPLETED",
                "customerName": "Ion", "customerPhone": "0722",
                "parts": [{"name": "Oil", "quantity": 2, "price": 50, "stockId": "s-oil"}],
                "labor": [{"description": "Oil change", "hours": 2, "rate": 100}],
                "partsDiscount": 10, "mechanicIds": ["m1"],
            },
            {"id": "broken", "status": "COMPLETED"},
        ],
        "mechanics": [{"id": "m1", "name": "Andrei"}, {"id": "m2", "name": "Bogdan"}],
        "stock_items": [{"id": "s-oil", "name": "Oil", "price": 30}],
    })


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root_health():
    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_post_advanced_report_from_body():
    payload = {
        "estimates": [{
            "id": "e1", "date": "2024-06-01", "status": "COMPLETED", "customerName": "Ana",
            "parts": [{"name": "Oil", "quantity": 2, "price": 50}],
            "labor": [{"description": "Oil change", "hours": 2, "rate": 100}],
            "partsDiscount": 10, "laborDiscount": 0, "mechanicIds": ["m1"],
        }],
        "mechanics": [{"id": "m1", "name": "Andrei"}],
        "stockItems": [],
        "start": "2024-06-01",
        "end": "2024-06-30",
        "asOf": "2024-06-30",
    }

    response = TestClient(app).post("/api/reports/advanced", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["kpis"]["total_revenue"] == pytest.approx(290)
    assert data["kpis"]["total_discounts_given"] == pytest.approx(10)
    assert data["client_insights"]["new_clients"] == 1
    assert data["mechanic_performance"][0]["total_labor_revenue"] == pytest.approx(200)
    assert data["top_parts"] == []
    assert len(data["monthly_revenue"]) == 12


def test_post_advanced_report_rejects_inverted_window():
    payload = {"start": "2024-06-30", "end": "2024-06-01"}

    response = TestClient(app).post("/api/reports/advanced", json=payload)

    assert response.status_code == 400


def test_get_advanced_report_from_store(client, store):
    response = client.get("/api/reports/advanced")

    assert response.status_code == 200
    data = response.json()
    assert data["kpis"]["completed_count"] == 1
    assert data["kpis"]["total_profit"] == pytest.approx(90 - 60 + 200)
    assert data["top_parts"][0]["profit"] == pytest.approx(30)
    assert store.cached_snapshot().skipped_rows == 1


def test_snapshot_is_cached_between_requests(client, store):
    client.get("/api/reports/monthly-revenue")
    client.get("/api/reports/monthly-revenue")

    assert store.fetches == 3


def test_dashboard_and_monthly_revenue(client):
    dashboard = client.get("/api/reports/dashboard", params={"range": "month"})
    series = client.get("/api/reports/monthly-revenue", params={"months": 3})

    assert dashboard.status_code == 200
    assert dashboard.json()["range"] == "month"
    assert series.status_code == 200
    assert len(series.json()["series"]) == 3
    assert client.get("/api/reports/dashboard", params={"range": "year"}).status_code == 422


def test_mechanics_and_rankings(client):
    mechanics = client.get("/api/reports/mechanics").json()["mechanics"]
    rankings = client.get("/api/reports/rankings", params={"mechanic_id": "m2"}).json()

    assert [m["mechanic_id"] for m in mechanics] == ["m1", "m2"]
    assert mechanics[0]["avg_hourly_rate"] == pytest.approx(100)
    assert rankings["top_services"] == []
    assert rankings["date_range"]["mechanic_id"] == "m2"


def test_data_status_and_refresh(client, store):
    assert client.get("/api/data/status").json() == {"loaded": False}

    refreshed = client.post("/api/data/refresh").json()
    status = client.get("/api/data/status").json()

    assert refreshed["status"] == "refreshed"
    assert refreshed["estimates"] == 1
    assert status["loaded"] is True
    assert status["skipped_rows"] == 1


def test_store_failure_is_503():
    class FailingStore(InMemoryStore):
        def _fetch_documents(self, table_name):
            raise ConnectionError("supabase down")

    app.dependency_overrides[get_store] = lambda: FailingStore({})
    try:
        response = TestClient(app).get("/api/reports/advanced")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
