# tests/test_correlation_id.py
"""
Tests for correlation ID middleware and context management.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_NAME", "Test App")

import uuid

import pytest
from fastapi.testclient import TestClient

from worthline.main import app
from worthline.middleware import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from worthline.utils.context import clear_correlation_id, get_correlation_id, set_correlation_id


class TestCorrelationIdContext:
    """Tests for correlation ID context functions."""

    def test_get_returns_none_when_not_set(self):
        """Should return None when correlation ID is not set."""
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_set_and_get_correlation_id(self):
        """Should set and retrieve correlation ID."""
        set_correlation_id("test-correlation-123")
        assert get_correlation_id() == "test-correlation-123"
        clear_correlation_id()

    def test_clear_correlation_id(self):
        """Should clear correlation ID."""
        set_correlation_id("test-correlation-456")
        clear_correlation_id()
        assert get_correlation_id() is None


class TestCorrelationIdMiddleware:
    """Tests for correlation ID middleware."""

    @pytest.fixture
    def client(self):
        with TestClient(app) as c:
            yield c

    def test_generates_correlation_id_when_not_provided(self, client):
        """Should generate a UUID when no header is sent."""
        response = client.get("/health")

        assert response.status_code == 200
        generated = response.headers[CORRELATION_ID_HEADER]
        assert str(uuid.UUID(generated)) == generated

    def test_echoes_correlation_id_header(self, client):
        """Should reuse the client's X-Correlation-ID."""
        response = client.get("/health", headers={CORRELATION_ID_HEADER: "trace-abc"})
        assert response.headers[CORRELATION_ID_HEADER] == "trace-abc"

    def test_falls_back_to_request_id_header(self, client):
        """Should use X-Request-ID when X-Correlation-ID is absent."""
        response = client.get("/health", headers={REQUEST_ID_HEADER: "req-789"})
        assert response.headers[CORRELATION_ID_HEADER] == "req-789"

    def test_correlation_id_wins_over_request_id(self, client):
        response = client.get(
            "/health",
            headers={CORRELATION_ID_HEADER: "corr-1", REQUEST_ID_HEADER: "req-1"},
        )
        assert response.headers[CORRELATION_ID_HEADER] == "corr-1"

    def test_error_responses_carry_header(self, client):
        """Handled errors still get the correlation ID."""
        response = client.get(
            "/portfolio/snapshot",
            params={"date": "not-a-date"},
            headers={CORRELATION_ID_HEADER: "trace-err"},
        )

        assert response.status_code == 400
        assert response.headers[CORRELATION_ID_HEADER] == "trace-err"
