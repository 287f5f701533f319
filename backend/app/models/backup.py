"""Backup model definition."""

from __future__ import annotations

from sqlalchemy.dialects import mysql

from ..extensions import db

# MySQL DATETIME drops fractional seconds unless fsp is given.
PreciseDateTime = db.DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")


class Backup(db.Model):
    """Immutable snapshot of the settings and appdata documents."""

    __tablename__ = "backups"

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(64), unique=True, nullable=False)
    settings = db.Column(db.JSON(none_as_null=True), nullable=True)
    appdata = db.Column(db.JSON(none_as_null=True), nullable=True)
    created_at = db.Column(PreciseDateTime, nullable=False, index=True)

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<Backup {self.filename!r}>"
