import random

import pytest
from fastapi.testclient import TestClient

from app.core import pipeline
from app.core.pipeline import DashboardSession
from app.core.store import InMemoryStore
from app.main import create_app
from finance.series import SyntheticSeries


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def client(store):
    def factory():
        return DashboardSession(
            organization_type="startup",
            store=store,
            profile_id="user-1",
            series=SyntheticSeries(rng=random.Random(0)),
            tick_seconds=3600,
        )

    with TestClient(create_app(factory)) as c:
        yield c


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_simulate_returns_results_and_persists(client, store):
    resp = client.post("/simulate")
    assert resp.status_code == 200
    body = resp.json()
    assert body["results"]["revenue"] == 359880
    assert body["results"]["netProfit"] == -640120
    assert body["results"]["runway"] == 5
    assert body["usage"] == {"simulations": 1, "exports": 0}
    assert store.financial_data["user-1"]["monthly_revenue"] == pytest.approx(29990)


def test_simulate_survives_store_failure(client, store, monkeypatch):
    def broken(profile_id, record):
        raise ConnectionError("down")

    monkeypatch.setattr(store, "save_simulation", broken)
    resp = client.post("/simulate")
    assert resp.status_code == 200
    assert resp.json()["results"]["expenses"] == 1000000


def test_put_inputs_then_simulate(client):
    payload = {
        "inputs": {
            "employees": 0,
            "marketingSpend": 0,
            "productPrice": 0,
            "miscExpenses": 0,
            "currentFunds": 900000,
            "customParameters": [{"key": "region", "value": "EU"}],
        },
        "organizationType": "other",
    }
    resp = client.put("/inputs", json=payload)
    assert resp.status_code == 200
    assert resp.json()["inputs"]["customParameters"] == [{"key": "region", "value": "EU"}]

    body = client.post("/simulate").json()["results"]
    assert body["revenue"] == 0
    assert body["expenses"] == 300000
    assert body["runway"] == 3
    assert body["profitMargin"] == 0


def test_runway_finite_while_fixed_costs_remain(client):
    client.put(
        "/inputs",
        json={"inputs": {"employees": 0, "marketingSpend": 0, "miscExpenses": 0}, "organizationType": "startup"},
    )
    assert client.post("/simulate").json()["results"]["runway"] is not None


def test_negative_inputs_rejected(client):
    resp = client.put("/inputs", json={"inputs": {"employees": -1}})
    assert resp.status_code == 422


def test_export_and_usage(client):
    client.post("/export")
    client.post("/simulate")
    assert client.post("/export").json() == {"simulations": 1, "exports": 2}
    assert client.get("/usage").json() == {"simulations": 1, "exports": 2}


def test_series_and_context_consistent(client):
    series = client.get("/series").json()
    assert len(series) == 8
    assert series[-1]["month"] == "Aug"
    ctx = client.get("/context").json()
    assert ctx["currentRevenue"] == series[-1]["revenue"]
    assert ctx["cashFlow"] == pytest.approx(series[-1]["revenue"] - series[-1]["expenses"])
    assert ctx["projectedRevenue"] == 359880
    assert ctx["growthRate"] == 15
    assert ctx["timeHorizon"] == 12


def test_advisor_fallback(client, monkeypatch):
    def failing_query(messages):
        raise RuntimeError("offline")

    monkeypatch.setattr(pipeline, "query_advisor", failing_query)
    resp = client.post("/advisor", json={"question": "How is runway looking?"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "fallback"
    assert body["reply"].startswith("Summary:")
    assert body["context"]["expenses"] == 1000000
