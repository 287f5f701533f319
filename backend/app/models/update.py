"""Update feed model definition."""

from __future__ import annotations

from ..extensions import db

DEFAULT_STAFF = "Anonymous"
DEFAULT_TYPE = "general"


class Update(db.Model):
    """A staff-submitted feed entry, optionally carrying one photo."""

    __tablename__ = "updates"

    # Insertion order; the feed lists the highest sequence number first.
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(32), unique=True, nullable=False)
    staff = db.Column(db.String(255), nullable=False, default=DEFAULT_STAFF)
    message = db.Column(db.Text, nullable=False, default="")
    type = db.Column(db.String(64), nullable=False, default=DEFAULT_TYPE)
    day = db.Column(db.Integer, nullable=False, default=0)
    photo = db.Column(db.String(255), nullable=True)
    timestamp = db.Column(db.String(32), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<Update {self.id!r} by {self.staff!r}>"
