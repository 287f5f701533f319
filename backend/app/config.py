"""Configuration for the Iftar Desk backend."""

from __future__ import annotations

import os
from pathlib import Path

_DATA_DIR = os.getenv("DATA_DIR", str(Path(__file__).resolve().parents[2] / "data"))


class Config:
    """Base configuration for the Flask application."""

    DATA_DIR: str = _DATA_DIR
    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL", "sqlite:///" + os.path.join(_DATA_DIR, "iftar_desk.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    JSONIFY_PRETTYPRINT_REGULAR: bool = False
    CORS_ALLOWED_ORIGINS: str = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    DB_INIT_MAX_RETRIES: int = int(os.getenv("DB_INIT_MAX_RETRIES", "30"))
    DB_INIT_RETRY_DELAY: float = float(os.getenv("DB_INIT_RETRY_DELAY", "2"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Front-end files (index.html, manifest.json, sw.js) served from the site root.
    STATIC_FOLDER: str = os.getenv(
        "STATIC_FOLDER", str(Path(__file__).resolve().parents[2] / "public")
    )

    MAX_BACKUPS: int = int(os.getenv("MAX_BACKUPS", "20"))

    # "local" keeps photos in UPLOAD_FOLDER, "s3" uses an S3-compatible bucket.
    PHOTO_STORAGE: str = os.getenv("PHOTO_STORAGE", "local")
    UPLOAD_FOLDER: str = os.getenv("UPLOAD_FOLDER", os.path.join(_DATA_DIR, "uploads"))
    S3_BUCKET: str | None = os.getenv("S3_BUCKET")
    S3_PREFIX: str = os.getenv("S3_PREFIX", "uploads/")
    S3_ENDPOINT_URL: str | None = os.getenv("S3_ENDPOINT_URL")
    S3_REGION: str | None = os.getenv("S3_REGION")

    MAX_PHOTO_SIZE: int = 10 * 1024 * 1024
    # Multipart framing and text fields ride on top of the photo itself.
    MAX_CONTENT_LENGTH: int = MAX_PHOTO_SIZE + 1024 * 1024
    UPDATES_RATE_LIMIT: str = os.getenv("UPDATES_RATE_LIMIT", "30 per minute")
    RATELIMIT_STORAGE_URI: str = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
