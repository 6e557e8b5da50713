import pytest
from fastapi.testclient import TestClient

from api.database import get_db
from api.main import app
from db.db_utils import build_engine, get_session
from pipeline.orchestrator import run_case_study


def client_for(engine):
    def override_get_db():
        db = get_session(engine)
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def client(settings, engine):
    run_case_study("attendance", settings=settings, export=False)
    run_case_study("invoices", settings=settings, export=False)
    yield client_for(engine)
    app.dependency_overrides.clear()


@pytest.fixture
def empty_client(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    yield client_for(engine)
    app.dependency_overrides.clear()
    engine.dispose()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_attendance_summary(client):
    response = client.get("/reports/attendance/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["report"] == "attendance_summary"
    assert body["rows"][0]["days"] == 5
    assert body["rows"][0]["tardy_rate"] == 20.0


def test_attendance_by_weekday(client):
    response = client.get("/reports/attendance/weekday")

    rows = response.json()["rows"]
    assert [row["weekday"] for row in rows][:2] == ["Monday", "Tuesday"]
    assert [row["days"] for row in rows] == [2, 3, 0, 0, 0, 0, 0]
    assert rows[2]["avg_minutes_late"] is None


def test_unknown_dimension_is_rejected(client):
    assert client.get("/reports/attendance/hour").status_code == 422


def test_invoice_summary(client):
    row = client.get("/reports/invoices/summary").json()["rows"][0]

    assert row["top_country_revenue_loss"] == "France"
    assert row["percentage_disputes_lost"] == 66.67


def test_disputed_quarters(client):
    body = client.get("/reports/invoices/quarterly", params={"disputed_only": True}).json()

    assert body["report"] == "dispute_settlement_by_quarter"
    assert [row["invoice_count"] for row in body["rows"]] == [2, 1]


def test_customer_distribution_defaults_to_top_country(client):
    rows = client.get("/reports/invoices/customers").json()["rows"]
    assert rows[0]["customer_id"] == "3448-OWJOT"

    germany = client.get("/reports/invoices/customers", params={"country": "Germany"}).json()["rows"]
    assert [row["customer_id"] for row in germany] == ["1111-AAAAA"]


def test_missing_tables_give_404(empty_client):
    response = empty_client.get("/reports/invoices/disputes")

    assert response.status_code == 404
    assert "invoices" in response.json()["detail"]
