"""Application factory for the Iftar Desk backend."""
from __future__ import annotations

import logging
import time
from http import HTTPStatus
from pathlib import Path

from flask import Flask, current_app, jsonify
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import cors, db, limiter
from .services import PhotoStore, build_services


def create_app(config_class: type[Config] = Config, photo_store: PhotoStore | None = None) -> Flask:
    """Create and configure the Flask application instance."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    _ensure_sqlite_directory(app)
    db.init_app(app)

    allowed_origins = [
        origin.strip()
        for origin in (app.config.get("CORS_ALLOWED_ORIGINS") or "").split(",")
        if origin.strip()
    ]
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": allowed_origins}, r"/uploads/*": {"origins": allowed_origins}},
        methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    limiter.init_app(app)

    from .api.backups import bp as backups_bp
    from .api.documents import bp as documents_bp
    from .api.frontend import bp as frontend_bp
    from .api.health import bp as health_bp
    from .api.updates import bp as updates_bp
    from .api.uploads import bp as uploads_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(health_bp, name="root_health")
    app.register_blueprint(documents_bp, url_prefix="/api")
    app.register_blueprint(backups_bp, url_prefix="/api")
    app.register_blueprint(updates_bp, url_prefix="/api")
    app.register_blueprint(uploads_bp)
    app.register_blueprint(frontend_bp)

    app.register_error_handler(Exception, _handle_unexpected_error)

    with app.app_context():
        # Import models to ensure they are registered with SQLAlchemy before creating tables.
        from .models import backup, document, update  # noqa: F401

        _initialize_database(app)
        build_services(app, db.session, photos=photo_store)

    return app


def _ensure_sqlite_directory(app: Flask) -> None:
    url = make_url(app.config["SQLALCHEMY_DATABASE_URI"])
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def _handle_unexpected_error(exc: Exception):
    if isinstance(exc, HTTPException):
        return exc
    current_app.logger.exception("Unhandled error while serving request")
    return jsonify({"error": "internal server error"}), HTTPStatus.INTERNAL_SERVER_ERROR


def _initialize_database(app: Flask) -> None:
    """Initialize the database with retry logic to handle delayed availability."""

    max_retries = int(app.config.get("DB_INIT_MAX_RETRIES", 30))
    retry_delay = float(app.config.get("DB_INIT_RETRY_DELAY", 2))

    for attempt in range(1, max_retries + 1):
        try:
            db.create_all()
            return
        except OperationalError as exc:
            if attempt >= max_retries:
                app.logger.exception("Database initialization failed after %s attempts.", attempt)
                raise

            app.logger.warning(
                "Database initialization attempt %s/%s failed: %s", attempt, max_retries, exc
            )
            time.sleep(retry_delay)
