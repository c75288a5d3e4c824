"""
Tests for health and version endpoints
"""
from fastapi import status

from app.core.constants import SERVICE_NAME, SYSTEM_CREDIT


def test_health_endpoint(client):
    """Test health endpoint returns correct response"""
    response = client.get("/api/v1/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["status"] == "ok"
    assert data["service"] == SERVICE_NAME
    assert data["credit"] == SYSTEM_CREDIT


def test_version_endpoint_returns_credit_and_version(client):
    """Version endpoint is public and reports service metadata"""
    response = client.get("/api/v1/version")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["service"] == SERVICE_NAME
    assert "version" in data
    assert data["env"] in ["local", "staging", "prod"]
    assert data["credit"] == SYSTEM_CREDIT


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/nope")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {
        "success": False,
        "message": "Not Found",
        "status_code": 404,
        "path": "/api/v1/nope",
    }
