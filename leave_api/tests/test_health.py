"""
Tests for health check endpoint
"""
from fastapi import status


def test_health_check(client):
    """Test health check endpoint returns ok"""
    response = client.get("/api/v1/health")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "leave-api"
