"""Newest-first feed of staff updates with photo attachments."""

from __future__ import annotations

import logging
import math
import re
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import PersistenceError
from ..models.update import DEFAULT_STAFF, DEFAULT_TYPE, Update
from .photos import PhotoStore, random_base36

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_DAY_MIN = -(2**31)
_DAY_MAX = 2**31 - 1


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_update_id() -> str:
    """Return a time-ordered id: base-36 epoch milliseconds plus a random suffix."""

    return _to_base36(int(time.time() * 1000)) + random_base36(6)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_day(value: Any) -> int:
    """Leniently parse a day number.

    Anything without a leading integer, or outside the 32-bit column range, becomes 0.
    """

    day = 0
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        day = value
    elif isinstance(value, float):
        day = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            day = int(match.group(1))
    if not _DAY_MIN <= day <= _DAY_MAX:
        return 0
    return day


def _text(value: Any, default: str) -> str:
    if not value:
        return default
    return str(value)


class UpdateFeed:
    """Insert-at-head, delete-by-id collection of :class:`Update` records."""

    def __init__(self, session: Session, photos: PhotoStore) -> None:
        self._session = session
        self._photos = photos

    @property
    def photos(self) -> PhotoStore:
        return self._photos

    def list(self) -> list[Update]:
        return self._session.query(Update).order_by(Update.seq.desc()).all()

    def get(self, update_id: str) -> Update | None:
        return self._session.query(Update).filter_by(id=update_id).first()

    def insert(
        self,
        fields: Mapping[str, Any],
        photo: bytes | None = None,
        photo_filename: str | None = None,
    ) -> Update:
        """Create a record from ``fields``; any client supplied id or timestamp is ignored.

        A photo that cannot be stored is dropped with a warning rather than
        failing the whole insert.
        """

        photo_ref = None
        if photo is not None:
            try:
                photo_ref = self._photos.store(photo, photo_filename)
            except Exception:
                logger.warning("Failed to store photo %r, saving update without it", photo_filename, exc_info=True)

        update = Update(
            id=generate_update_id(),
            staff=_text(fields.get("staff"), DEFAULT_STAFF),
            message=_text(fields.get("message"), ""),
            type=_text(fields.get("type"), DEFAULT_TYPE),
            day=parse_day(fields.get("day")),
            photo=photo_ref,
            timestamp=utc_timestamp(),
        )
        try:
            self._session.add(update)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            if photo_ref is not None:
                self._discard_photo(photo_ref)
            raise PersistenceError("failed to save update") from exc
        except Exception:
            self._session.rollback()
            if photo_ref is not None:
                self._discard_photo(photo_ref)
            raise

        logger.info("Added update %s from %s", update.id, update.staff)
        return update

    def delete(self, update_id: str) -> bool:
        """Remove an update and its photo; returns ``False`` if the id is unknown."""

        update = self.get(update_id)
        if update is None:
            return False

        if update.photo:
            self._discard_photo(update.photo)

        try:
            self._session.delete(update)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"failed to delete update {update_id}") from exc

        logger.info("Deleted update %s", update_id)
        return True

    def _discard_photo(self, photo_ref: str) -> None:
        try:
            self._photos.delete(photo_ref)
        except Exception:
            logger.warning("Failed to delete photo %s", photo_ref, exc_info=True)
