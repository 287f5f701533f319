"""Storage services wired from the application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app
from sqlalchemy.orm import Session

from .backups import BackupManager
from .documents import DocumentStore
from .feed import UpdateFeed
from .photos import LocalPhotoStore, PhotoStore, S3PhotoStore

EXTENSION_KEY = "iftar_desk"


@dataclass
class Services:
    """The stores the request layer calls into, built once per application."""

    documents: DocumentStore
    backups: BackupManager
    photos: PhotoStore
    feed: UpdateFeed


def build_photo_store(config: dict) -> PhotoStore:
    backend = (config.get("PHOTO_STORAGE") or "local").strip().lower()
    if backend == "local":
        return LocalPhotoStore(config["UPLOAD_FOLDER"])
    if backend == "s3":
        bucket = config.get("S3_BUCKET")
        if not bucket:
            raise RuntimeError("S3_BUCKET must be set when PHOTO_STORAGE is 's3'")
        return S3PhotoStore.from_config(
            bucket,
            prefix=config.get("S3_PREFIX") or "",
            endpoint_url=config.get("S3_ENDPOINT_URL"),
            region=config.get("S3_REGION"),
        )
    raise RuntimeError(f"unsupported PHOTO_STORAGE {backend!r}")


def build_services(app: Flask, session: Session, photos: PhotoStore | None = None) -> Services:
    """Create the service container from ``app.config`` and register it on ``app``."""

    documents = DocumentStore(session)
    backups = BackupManager(documents, session, max_backups=int(app.config.get("MAX_BACKUPS", 20)))
    if photos is None:
        photos = build_photo_store(app.config)
    services = Services(
        documents=documents,
        backups=backups,
        photos=photos,
        feed=UpdateFeed(session, photos),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "BackupManager",
    "DocumentStore",
    "LocalPhotoStore",
    "PhotoStore",
    "S3PhotoStore",
    "Services",
    "UpdateFeed",
    "build_photo_store",
    "build_services",
    "get_services",
]
