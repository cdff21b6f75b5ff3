"""
Tests for health endpoints and application-level error responses.
"""

from fastapi.testclient import TestClient

from hoa_nexus.api.routes.health import API_VERSION
from hoa_nexus.database.registry import ConnectionRegistry, set_registry


def test_root(client):
    body = client.get("/").json()
    assert body["success"] is True
    assert body["message"] == "HOA Nexus API is running!"
    assert body["version"] == API_VERSION


def test_health_does_not_touch_database(client, engine_factory):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert engine_factory.calls == []


def test_db_check_requires_token(client):
    assert client.get("/api/test-db").status_code == 401


def test_db_check_uses_callers_database(client, engine_factory, auth_headers):
    response = client.get("/api/test-db", headers=auth_headers(databaseName="org_a"))
    assert response.status_code == 200
    assert response.json()["message"] == "Database connection successful"
    assert engine_factory.calls == ["org_a"]


def test_db_check_reports_failure(app, db_settings, auth_headers):
    def unreachable(name):
        raise RuntimeError("server unreachable")

    previous = set_registry(ConnectionRegistry(db_settings, engine_factory=unreachable))
    try:
        response = TestClient(app).get("/api/test-db", headers=auth_headers())
    finally:
        set_registry(previous)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Database connection failed"


def test_unreachable_tenant_returns_503(app, db_settings, auth_headers):
    def unreachable(name):
        raise RuntimeError("server unreachable")

    previous = set_registry(ConnectionRegistry(db_settings, engine_factory=unreachable))
    try:
        response = TestClient(app).get("/api/communities", headers=auth_headers(databaseName="org_x"))
    finally:
        set_registry(previous)

    assert response.status_code == 503
    assert response.json()["error"]["type"] == "DatabaseConnectionError"


def test_unknown_api_route(client, auth_headers):
    response = client.get("/api/nothing-here", headers=auth_headers())
    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "API route not found",
        "requestedUrl": "/api/nothing-here",
    }


def test_unknown_non_api_route(client):
    response = client.get("/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}
