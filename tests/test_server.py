from fastapi.testclient import TestClient

from server import app

client = TestClient(app)


def simulate_payload(**overrides) -> dict:
    config = {
        "scenario": "API",
        "principal": 10000,
        "annual_contribution": 0,
        "growth_rate_pct": 10,
        "tax_rate_pct": 50,
        "years": 2,
    }
    config.update(overrides)
    return {"config": config}


def test_health():
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_simulate_returns_rows_and_summary():
    resp = client.post("/api/simulate", json=simulate_payload())
    assert resp.status_code == 200
    body = resp.json()
    assert body["scenario"] == "API"
    assert [row["year"] for row in body["rows"]] == [1, 2]
    assert body["rows"][0]["taxable_balance"] == "10500.00"
    assert body["rows"][0]["tax_paid"] == "500.00"
    assert body["summary"]["final_tax_advantaged_balance"] == "12100.00"
    assert body["summary"]["tax_drag_loss"] == "1075.00"
    assert body["summary"]["total_tax_paid"] == "1025.00"


def test_validate_accepts_good_config():
    resp = client.post("/api/validate", json=simulate_payload())
    assert resp.status_code == 200
    assert resp.json() == {"valid": True, "scenario": "API"}


def test_invalid_horizon_is_422():
    resp = client.post("/api/simulate", json=simulate_payload(years=0))
    assert resp.status_code == 422
    assert "detail" in resp.json()


def test_schema_error_is_422():
    resp = client.post("/api/validate", json={"config": {"years": 5}})
    assert resp.status_code == 422


def test_startup_configures_server_log(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with TestClient(app) as started:
        assert started.get("/api/health").status_code == 200
    assert (tmp_path / "server.log").exists()
