"""Tests for the application factory and health check."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from propmapper.api import create_app


@pytest.fixture
def session(session_factory):
    return session_factory()


class TestCreateApp:
    """Test the full application with its lifespan."""

    def test_health_through_app(self, session):
        """Test that the factory mounts the routes under /api."""
        with patch("propmapper.api.app._session", session):
            with TestClient(create_app()) as client:
                response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "propmapper"

    def test_health_shows_key_presence_without_secrets(self, session):
        """Test that key presence is reported as booleans only."""
        with patch("propmapper.api.app._session", session):
            with TestClient(create_app()) as client:
                response = client.get("/api/health")

        config = response.json()["config"]
        assert isinstance(config["anthropic_key_present"], bool)
        assert isinstance(config["openrouter_key_present"], bool)
        assert "sk-ant-" not in response.text

    def test_startup_survives_schema_outage(self, session_factory, schema_client, schema_service):
        """Test that a failed schema fetch on startup does not stop the app."""
        from propmapper.schema import SchemaCache

        schema_service.fail_with = 503
        session = session_factory()
        session.schema = SchemaCache(schema_client)

        with patch("propmapper.api.app._session", session):
            with TestClient(create_app()) as client:
                data = client.get("/api/health").json()

        assert data["schema_loaded"] is False
