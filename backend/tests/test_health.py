"""Tests for the healthcheck endpoint."""

from __future__ import annotations

from iftar_desk import Config, create_app
from backend.app.services.photos import LocalPhotoStore


class HealthTestConfig(Config):
    """Configuration used during testing."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"


def create_test_app(tmp_path):
    """Create an application instance configured for tests."""

    return create_app(HealthTestConfig, photo_store=LocalPhotoStore(tmp_path))


def test_health_endpoint_returns_ok(tmp_path):
    """The healthcheck endpoint should return a JSON payload with status ok."""

    app = create_test_app(tmp_path)
    client = app.test_client()

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_health_endpoint_is_also_served_from_root(tmp_path):
    app = create_test_app(tmp_path)
    client = app.test_client()

    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}
