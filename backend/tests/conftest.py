from __future__ import annotations

import pathlib
import sys

import pytest
from sqlalchemy.pool import StaticPool

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _load_dependencies():
    from iftar_desk import Config, create_app
    from backend.app.extensions import db
    from backend.app.services.photos import LocalPhotoStore

    return Config, create_app, db, LocalPhotoStore


ConfigBase, create_app, db, LocalPhotoStore = _load_dependencies()


class TestConfig(ConfigBase):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    CORS_ALLOWED_ORIGINS = "http://localhost"
    UPDATES_RATE_LIMIT = "1000 per minute"


@pytest.fixture(scope="module")
def upload_dir(tmp_path_factory) -> pathlib.Path:
    return tmp_path_factory.mktemp("uploads")


@pytest.fixture(scope="module")
def app(upload_dir):
    app = create_app(TestConfig, photo_store=LocalPhotoStore(upload_dir))
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    from backend.app.services import get_services

    return get_services()


@pytest.fixture(autouse=True)
def clean_database(app):
    from backend.app.models import Backup, Document, Update

    yield

    db.session.rollback()
    db.session.query(Backup).delete()
    db.session.query(Document).delete()
    db.session.query(Update).delete()
    db.session.commit()
