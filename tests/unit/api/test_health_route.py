"""Unit tests for the health endpoint and request logging middleware."""

import pytest
from fastapi.testclient import TestClient

from ipdocket.api.main import app
from ipdocket.api.middleware.logging_middleware import CORRELATION_HEADER


class TestHealthEndpoint:
    """Tests for GET /v1/health."""

    @pytest.fixture
    def client(self) -> TestClient:
        return TestClient(app)

    def test_returns_healthy(self, client: TestClient, project_version: str) -> None:
        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": project_version}

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={CORRELATION_HEADER: "req-42"})

        assert response.headers[CORRELATION_HEADER] == "req-42"

    def test_correlation_id_generated(self, client: TestClient) -> None:
        response = client.get("/v1/health")

        assert len(response.headers[CORRELATION_HEADER]) == 36
