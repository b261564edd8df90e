from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from trade_analytics.web.app import app


@pytest.fixture
def client():
    app.state.dashboard_cache.clear()
    return TestClient(app)


def rows():
    return [
        {"id": "1", "symbol": "SPY", "position_type": 1, "entry_price": 1.0, "exit_price": 2.0, "quantity": 1,
         "entry_date": "2024-01-01", "exit_date": "2024-01-01", "profit": 100.0, "result": 1,
         "tags": [{"id": "t1", "name": "scalp", "color": "#00ff00"}]},
        {"id": "2", "symbol": "QQQ", "position_type": 2, "entry_price": 2.0, "exit_price": 1.6, "quantity": 1,
         "entry_date": "2024-01-05", "exit_date": "2024-01-05T21:00:00Z", "profit": -40.0, "result": 0},
    ]


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_dashboard_endpoint(client):
    response = client.post("/api/dashboard", json={"trades": rows(), "starting_balance": 1000})
    assert response.status_code == 200
    payload = response.json()
    assert payload["metrics"]["current_balance"] == 1060.0
    assert payload["metrics"]["win_rate"] == 50.0
    assert payload["cumulative_profit"] == [
        {"date": "2024-01-01", "cumulative": 100.0, "profit": 100.0},
        {"date": "2024-01-05", "cumulative": 60.0, "profit": -40.0},
    ]
    assert payload["filter"]["type"] == "ALL_TIME"
    assert payload["skipped"] == 0


def test_dashboard_endpoint_with_filters_and_cache(client):
    body = {
        "trades": rows() + [{"id": "3"}],
        "starting_balance": 1000,
        "date_range": "CUSTOM",
        "start": "2024-01-02",
        "tag_ids": [],
    }
    first = client.post("/api/dashboard", json=body)
    assert first.status_code == 200
    payload = first.json()
    assert payload["trade_count"] == 1
    assert payload["period_starting_balance"] == 1100.0
    assert payload["filter"]["start_date"] == "2024-01-02"
    assert payload["skipped"] == 1
    assert len(app.state.dashboard_cache) == 1

    second = client.post("/api/dashboard", json=body)
    assert second.json() == payload
    assert len(app.state.dashboard_cache) == 1


def test_dashboard_rejects_unknown_range(client):
    response = client.post("/api/dashboard", json={"trades": [], "date_range": "FOREVER"})
    assert response.status_code == 422


def test_batches_endpoint(client):
    response = client.post("/api/batches", json={"trades": rows()})
    assert response.status_code == 200
    payload = response.json()
    assert payload["is_baseline"] is True
    assert payload["current"]["trade_ids"] == ["2", "1"]
    assert payload["current"]["result_winners"] == 1
    assert [point["trade_number"] for point in payload["comparison"]] == [1, 2]


def test_balance_at_endpoint(client):
    body = {"trades": rows(), "starting_balance": 1000, "target_date": "2024-01-05T09:00:00"}
    response = client.post("/api/balance-at", json=body)
    assert response.status_code == 200
    assert response.json() == {"target_date": "2024-01-05", "balance": 1100.0, "skipped": 0}


def test_balance_at_without_target(client):
    response = client.post("/api/balance-at", json={"trades": rows(), "starting_balance": 250})
    assert response.json()["balance"] == 250.0
    assert response.json()["target_date"] is None


def test_batches_endpoint_gauge_honours_win_flag(client):
    flagged = rows()
    flagged[1]["result"] = 1
    response = client.post("/api/batches", json={"trades": flagged})
    current = response.json()["current"]
    assert current["metrics"]["win_rate"] == 50.0
    assert current["result_winners"] == 2
    assert [slice_["value"] for slice_ in current["win_loss_gauge"]] == [100.0, 0.0]
    assert current["worst_trade"]["result"] == "WIN"
    assert current["worst_trade"]["position_type"] == "PUT"
