from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from cloudcompare.app import create_app
from cloudcompare.config import DEFAULT_SETTINGS
from cloudcompare.middleware import SECURITY_HEADERS

CONSTRAINTS = {"budget": "low", "experience": "beginner", "workload": "startup", "priorities": ["cost", "aiml"]}


def _client(data_dir, **overrides) -> TestClient:
    settings = replace(DEFAULT_SETTINGS, data_dir=data_dir, rate_limit_requests=1000, **overrides)
    return TestClient(create_app(settings))


@pytest.fixture
def client(data_dir):
    with _client(data_dir) as c:
        yield c


@pytest.fixture
def empty_client(tmp_path):
    with _client(tmp_path) as c:
        yield c


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["service"] == "cloud-platform-comparison-tool"
    assert body["data"] == {
        "initialized": True,
        "providerCount": 3,
        "providers": ["aws", "azure", "gcp"],
        "integrity": "valid",
    }


def test_security_headers(client):
    resp = client.get("/api/health")
    for header, value in SECURITY_HEADERS.items():
        assert resp.headers[header] == value


def test_data_validate(client):
    body = client.get("/api/data/validate").json()
    assert body["validation"]["isValid"] is True
    assert body["statistics"]["providerCount"] == 3


def test_compare(client):
    resp = client.post("/api/compare", json={"constraints": CONSTRAINTS})
    assert resp.status_code == 200
    body = resp.json()
    assert list(body["providers"]) == ["aws", "azure", "gcp"]
    assert {"crossProviderAnalysis", "decisionGuidance", "constraintSummary", "timestamp"} <= set(body)
    assert body["constraints"]["priorities"] == ["cost", "aiml"]
    assert body["metadata"]["fromCache"] is False
    assert body["metadata"]["warnings"] == []


def test_compare_second_call_is_cached(client):
    client.post("/api/compare", json={"constraints": CONSTRAINTS})
    body = client.post("/api/compare", json={"constraints": CONSTRAINTS}).json()
    assert body["metadata"]["fromCache"] is True
    assert body["metadata"]["cacheStats"]["hits"] == 1

    stats = client.get("/api/cache/stats").json()
    assert stats["size"] == 1
    assert stats["misses"] == 1


def test_compare_sanitizes_input(client):
    resp = client.post("/api/compare", json={"constraints": {**CONSTRAINTS, "budget": "<low>"}})
    assert resp.status_code == 200
    assert resp.json()["constraints"]["budget"] == "low"


def test_compare_rejects_invalid_constraints(client):
    resp = client.post("/api/compare", json={"constraints": {**CONSTRAINTS, "budget": "ultra"}})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "CONSTRAINT_VALIDATION_ERROR"
    assert error["details"] == ["Invalid budget level: ultra. Must be one of: low, medium, high"]
    assert "timestamp" in error


def test_compare_requires_constraints(client):
    resp = client.post("/api/compare", json={})
    assert resp.status_code == 422


def test_validate_constraints(client):
    resp = client.post("/api/constraints/validate", json={"constraints": {"budget": "high"}})
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is True
    assert body["constraints"]["budget"] == "high"
    assert body["summary"]["summary"].startswith("Looking for a cloud platform with high budget")
    assert "Experience level not specified, defaulting to intermediate" in body["warnings"]


def test_validate_constraints_invalid(client):
    resp = client.post("/api/constraints/validate", json={"constraints": {"workload": "gaming"}})
    assert resp.status_code == 400
    body = resp.json()
    assert body["valid"] is False
    assert body["errors"] == ["Invalid workload type: gaming. Must be one of: startup, enterprise, research"]


def test_reload_clears_cache(client):
    client.post("/api/compare", json={"constraints": CONSTRAINTS})
    resp = client.post("/api/data/reload")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["providersLoaded"] == 3
    assert client.get("/api/cache/stats").json()["size"] == 0


def test_no_data(empty_client):
    health = empty_client.get("/api/health").json()
    assert health["data"]["integrity"] == "invalid"

    resp = empty_client.post("/api/compare", json={"constraints": CONSTRAINTS})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "NO_DATA_AVAILABLE"

    resp = empty_client.post("/api/data/reload")
    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "DATA_RELOAD_ERROR"


def test_rate_limit(data_dir):
    with _client(data_dir) as c:
        c.app.state.rate_limiter.max_requests = 2
        assert c.get("/api/health").status_code == 200
        assert c.get("/api/health").status_code == 200
        resp = c.get("/api/health")
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
    assert "Retry-After" in resp.headers
