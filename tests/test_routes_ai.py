"""Tests for the /ai HTTP endpoints."""
import datetime as dt
from decimal import Decimal

from factories import FakeSummarizer

from invoice_insights.api.main import app
from invoice_insights.api.routes_ai import get_snapshot, get_summarizer
from invoice_insights.core.exceptions import AnalysisUnavailableError
from invoice_insights.models.models import Client, Invoice, Item
from invoice_insights.services.ai import Summarizer


def _seed(db_session):
    now = dt.datetime.now(dt.timezone.utc)
    acme, beta = Client(name="Acme"), Client(name="Beta")
    widget = Item(name="Widget", quantity=5, unit_price=Decimal("40"), status="in-stock")
    gadget = Item(name="Gadget", quantity=5, unit_price=Decimal("60"), status="in-stock")
    db_session.add_all(
        [
            acme,
            beta,
            widget,
            gadget,
            Invoice(
                invoice_number="INV-1",
                client=acme,
                total=Decimal("100"),
                status="paid",
                issue_date=now - dt.timedelta(days=5),
                due_date=now + dt.timedelta(days=25),
                items=[widget, gadget],
            ),
            Invoice(
                invoice_number="INV-2",
                client=beta,
                total=Decimal("40"),
                status="unpaid",
                issue_date=now - dt.timedelta(days=60),
                due_date=now - dt.timedelta(days=30),
                items=[widget],
            ),
        ]
    )
    db_session.commit()
    return acme, beta


def test_query_returns_analysis(client, db_session):
    _seed(db_session)
    app.dependency_overrides[get_summarizer] = lambda: FakeSummarizer("Beta is at risk.\n\nBeta owes $40.00")

    resp = client.post("/ai/query", json={"query": "Which clients show signs of churn risk?"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["query"] == "Which clients show signs of churn risk?"
    assert body["analysis"]["type"] == "churn_risk"
    assert body["analysis"]["summary"] == "Beta is at risk."
    assert len(body["analysis"]["insights"]) == 2
    assert body["metadata"]["model_used"] == "fake-model"
    assert body["metadata"]["data_points_analyzed"] == 6


def test_query_validation_errors(client):
    app.dependency_overrides[get_summarizer] = lambda: FakeSummarizer()

    empty = client.post("/ai/query", json={"query": "   "})
    too_long = client.post("/ai/query", json={"query": "x" * 501})
    missing = client.post("/ai/query", json={})

    for resp in (empty, too_long, missing):
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "ANL003"


def test_invalid_query_is_rejected_before_loading_snapshot(client):
    loads = []

    def tracking_snapshot():
        loads.append(1)
        raise AssertionError("snapshot should not be loaded")

    app.dependency_overrides[get_snapshot] = tracking_snapshot
    app.dependency_overrides[get_summarizer] = lambda: FakeSummarizer()

    resp = client.post("/ai/query", json={"query": "  "})

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "ANL003"
    assert loads == []


def test_query_without_api_key_is_503(client):
    app.dependency_overrides[get_summarizer] = lambda: Summarizer(api_key="")

    resp = client.post("/ai/query", json={"query": "How is business?"})

    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "ANL001"


def test_storage_failure_is_503(client):
    def broken_snapshot():
        raise AnalysisUnavailableError("storage", "connection refused")

    app.dependency_overrides[get_snapshot] = broken_snapshot

    resp = client.get("/ai/analytics/summary")

    assert resp.status_code == 503
    assert resp.json()["error"]["details"]["collaborator"] == "storage"


def test_analytics_summary(client, db_session):
    _seed(db_session)

    resp = client.get("/ai/analytics/summary")

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["total_invoices"] == 2
    assert body["summary"]["total_revenue"] == 100.0
    assert body["summary"]["unpaid_amount"] == 40.0
    assert body["client_count"] == 2
    assert body["item_count"] == 2


def test_dashboard(client, db_session):
    _seed(db_session)

    resp = client.get("/ai/insights/dashboard")

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["overdue_invoices"] == 1
    assert body["insights"][0]["priority"] == "high"
    assert body["recent_activity"]["recent_invoices"] == 2


def test_suggestions(client):
    resp = client.get("/ai/suggestions")

    assert resp.status_code == 200
    assert len(resp.json()["suggestions"]) == 5


def test_churn_risk(client, db_session):
    _seed(db_session)

    resp = client.get("/ai/analysis/churn-risk")

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["total_clients"] == 2
    assert all(c["risk_score"] > 30 for c in body["high_risk_clients"])


def test_pattern_changes_timeframes(client, db_session):
    _seed(db_session)

    ok = client.get("/ai/analysis/pattern-changes", params={"timeframe": "6months"})
    default = client.get("/ai/analysis/pattern-changes")
    bad = client.get("/ai/analysis/pattern-changes", params={"timeframe": "1year"})

    assert ok.status_code == 200
    assert ok.json()["timeframe"] == "6months"
    assert default.json()["timeframe"] == "3months"
    assert bad.status_code == 400
    assert bad.json()["error"]["code"] == "ANL002"


def test_client_recommendations(client, db_session):
    _acme, beta = _seed(db_session)

    resp = client.get(f"/ai/recommendations/client/{beta.id}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["client_id"] == str(beta.id)
    assert [r["name"] for r in body["recommendations"]] == ["Gadget"]
    assert body["total_recommendations"] == 1


def test_recommendations_for_unknown_client_are_empty(client):
    resp = client.get("/ai/recommendations/client/999")

    assert resp.status_code == 200
    assert resp.json()["recommendations"] == []
