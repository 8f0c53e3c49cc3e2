"""Smoke tests for the application lifespan wiring."""

from fastapi.testclient import TestClient

from main import app


def test_lifespan_configures_router():
    with TestClient(app) as client:
        health = client.get("/api/health").json()
        address_health = client.get("/api/address/health").json()
        telemetry = client.get("/api/address/telemetry/recent").json()

    assert health["status"] == "ok"
    assert address_health["status"] == "healthy"
    ready = [e for e in telemetry["events"] if e["event"] == "log"]
    assert ready[0]["message"] == "Address validation backend ready"
    assert ready[0]["properties"]["app_version"] == "0.1.0"


def test_blank_search_through_app():
    with TestClient(app) as client:
        response = client.post("/api/address/suggestions", json={"query": ""})

    assert response.status_code == 200
    assert response.json() == {"query": "", "suggestions": [], "count": 0}
