"""Tests for the address validation HTTP endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from addrsim.address_models import ValidationErrorKind
from addrsim.address_router import configure_router, router
from addrsim.validation_engine import ValidationScenario
from addrsim.validation_service import AsyncValidationService


ADDRESS_BODY = {
    "id": "addr-001",
    "first_name": "Jane",
    "last_name": "Smith",
    "street": "123 Main St",
    "city": "San Francisco",
    "state": "CA",
    "zip_code": "94105",
}


@pytest.fixture
def app_service(tracer, decision, no_latency_config):
    return AsyncValidationService(tracer, decision=decision, config=no_latency_config)


@pytest.fixture
def client(app_service, sink):
    app = FastAPI()
    app.include_router(router)
    configure_router(app_service, sink)
    yield TestClient(app)
    configure_router(None)


class TestValidateEndpoint:
    """Tests for POST /api/address/validate."""

    def test_valid(self, client, decision):
        decision.push(ValidationScenario.VALID)

        response = client.post("/api/address/validate", json={"address": ADDRESS_BODY})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["address_id"] == "addr-001"
        assert data["result"]["confidence"] == 0.95
        assert data["result"]["errors"] == []

    def test_soft_errors_are_200(self, client, decision):
        decision.push(ValidationScenario.PARTIAL_MATCH)

        response = client.post("/api/address/validate", json={"address": ADDRESS_BODY})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["result"]["errors"][0]["kind"] == "invalid_zip_code"
        assert data["result"]["suggested_address"]["street"] == "125 Main St"

    def test_short_fields_reach_validator(self, client, decision):
        decision.push(ValidationScenario.INVALID_ADDRESS)
        body = {**ADDRESS_BODY, "street": "1 A", "city": "X"}

        response = client.post("/api/address/validate", json={"address": body})

        assert response.status_code == 200
        kinds = {e["kind"] for e in response.json()["result"]["errors"]}
        assert kinds == {"invalid_street_address", "invalid_city"}

    @pytest.mark.parametrize(
        "kind, status",
        [
            (ValidationErrorKind.NETWORK_TIMEOUT, 504),
            (ValidationErrorKind.SERVICE_UNAVAILABLE, 503),
            (ValidationErrorKind.UNSERVICEABLE_AREA, 422),
        ],
    )
    def test_hard_failures_mapped(self, client, decision, kind, status):
        decision.push(kind)

        response = client.post(
            "/api/address/validate",
            json={"address": ADDRESS_BODY, "simulate_error": True},
        )

        assert response.status_code == status
        assert response.json()["detail"] == {"kind": kind.value, "message": kind.description}

    def test_missing_field_rejected(self, client):
        body = {k: v for k, v in ADDRESS_BODY.items() if k != "street"}

        response = client.post("/api/address/validate", json={"address": body})

        assert response.status_code == 422

    def test_id_assigned_when_omitted(self, client, decision):
        decision.push(ValidationScenario.VALID)
        body = {k: v for k, v in ADDRESS_BODY.items() if k != "id"}

        response = client.post("/api/address/validate", json={"address": body})

        assert response.status_code == 200
        assert response.json()["address_id"]


class TestCachedValidation:
    """Tests for GET /api/address/validation/{address_id}."""

    def test_returns_latest(self, client, decision):
        decision.push(ValidationScenario.VALID)
        client.post("/api/address/validate", json={"address": ADDRESS_BODY})

        response = client.get("/api/address/validation/addr-001")

        assert response.status_code == 200
        assert response.json()["result"]["is_valid"] is True

    def test_unknown_id(self, client):
        assert client.get("/api/address/validation/nope").status_code == 404


class TestSuggestionsEndpoint:
    """Tests for POST /api/address/suggestions."""

    def test_blank_query(self, client, sink):
        response = client.post("/api/address/suggestions", json={"query": "  "})

        assert response.status_code == 200
        assert response.json()["count"] == 0
        assert sink.events == []

    def test_query(self, client):
        response = client.post("/api/address/suggestions", json={"query": "main"})

        data = response.json()
        assert response.status_code == 200
        assert 3 <= data["count"] <= 8
        assert len(data["suggestions"]) == data["count"]


class TestTelemetryAndHealth:
    """Tests for the telemetry and health endpoints."""

    def test_recent_events(self, client, decision):
        decision.push(ValidationScenario.VALID)
        client.post("/api/address/validate", json={"address": ADDRESS_BODY})

        response = client.get("/api/address/telemetry/recent", params={"count": 3})

        events = response.json()["events"]
        assert [e["event"] for e in events] == ["span_started", "span_ended", "log"]
        assert response.json()["stats"]["spans_ended"] == 1

    def test_health(self, client):
        data = client.get("/api/address/health").json()

        assert data["status"] == "healthy"
        assert data["is_validating"] is False
        assert data["latency_enabled"] is False

    def test_unconfigured_returns_503(self):
        app = FastAPI()
        app.include_router(router)
        configure_router(None)
        client = TestClient(app)

        response = client.post("/api/address/suggestions", json={"query": "main"})

        assert response.status_code == 503
        assert client.get("/api/address/telemetry/recent").status_code == 503
        assert client.get("/api/address/health").json()["status"] == "not_initialized"
