"""Tests for health check endpoints."""

import os
from unittest.mock import patch

from fastapi.testclient import TestClient

from api.app import create_app

READY_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "test-service-key",
    "JWT_SECRET": "x" * 32,
}


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self):
        """Health endpoint should return 200 with status."""
        client = TestClient(create_app())
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0"}

    def test_ready_when_configured(self):
        with patch.dict(os.environ, READY_ENV):
            client = TestClient(create_app())
            response = client.get("/api/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "configured", "auth": "configured"}

    def test_not_ready_with_short_secret(self):
        with patch.dict(os.environ, {**READY_ENV, "JWT_SECRET": "short"}):
            client = TestClient(create_app())
            data = client.get("/api/ready").json()

        assert data["status"] == "not_ready"
        assert data["auth"] == "not_configured"
        assert data["database"] == "configured"
