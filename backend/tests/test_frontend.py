"""Tests for delivery of the front-end and PWA files."""

from __future__ import annotations

import pathlib
import sys

import pytest
from sqlalchemy.pool import StaticPool

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from iftar_desk import Config, create_app
from backend.app.extensions import db
from backend.app.services.photos import LocalPhotoStore


@pytest.fixture(scope="module")
def app(tmp_path_factory):
    static_dir = tmp_path_factory.mktemp("public")
    (static_dir / "index.html").write_text("<!doctype html><title>Iftar Desk</title>")
    (static_dir / "sw.js").write_text("self.addEventListener('fetch', () => {});")

    class FrontendConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
        SQLALCHEMY_ENGINE_OPTIONS = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
        STATIC_FOLDER = str(static_dir)

    app = create_app(FrontendConfig, photo_store=LocalPhotoStore(tmp_path_factory.mktemp("uploads")))
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    ctx.pop()


@pytest.mark.parametrize("path", ["/", "/index.html"])
def test_index_is_served(client, path):
    response = client.get(path)

    assert response.status_code == 200
    assert b"Iftar Desk" in response.data
    response.close()


def test_service_worker_is_never_cached(client):
    response = client.get("/sw.js")

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "no-cache"
    response.close()


def test_missing_manifest_returns_404(client):
    assert client.get("/manifest.json").status_code == 404
