"""Whole-replace JSON documents stored by key."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db

SETTINGS_KEY = "settings"
APPDATA_KEY = "appdata"
DOCUMENT_KEYS = (SETTINGS_KEY, APPDATA_KEY)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Document(db.Model):
    """Key/value store for the opaque settings and appdata documents."""

    __tablename__ = "documents"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<Document {self.key!r}>"
