"""Rotating backups of the settings and appdata documents."""

from __future__ import annotations

import copy
import json
import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import InvalidArgument, NotFound, PersistenceError
from ..models.backup import Backup
from ..models.document import APPDATA_KEY, DOCUMENT_KEYS, SETTINGS_KEY
from .documents import DocumentStore

logger = logging.getLogger(__name__)

MAX_BACKUPS = 20
FILENAME_PATTERN = re.compile(r"backup-\d{8}T\d{12}Z\.json")
_STAMP_FORMAT = "%Y%m%dT%H%M%S%f"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def backup_filename(created: datetime) -> str:
    """Return the fixed-width, lexicographically sortable name for a backup."""

    return f"backup-{created.strftime(_STAMP_FORMAT)}Z.json"


def format_timestamp(value: datetime) -> str:
    return value.isoformat() + "Z"


def backup_payload(backup: Backup) -> dict[str, Any]:
    """Serialize a backup including both document snapshots."""

    return {
        "filename": backup.filename,
        "settings": backup.settings,
        "appdata": backup.appdata,
        "created": format_timestamp(backup.created_at),
    }


@dataclass(frozen=True)
class BackupSummary:
    """Listing entry for a backup without its payload."""

    filename: str
    size: int
    created: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "size": self.size,
            "created": format_timestamp(self.created),
        }


class BackupManager:
    """Snapshots documents before each write and keeps the newest ``max_backups``.

    Every document write goes through :meth:`write_document`, which captures the
    pre-write state and the new value in one transaction while holding the
    manager's lock. :meth:`restore` takes the same lock, so a snapshot can never
    observe a half-applied restore or a concurrent write.
    """

    def __init__(
        self,
        store: DocumentStore,
        session: Session,
        max_backups: int = MAX_BACKUPS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_backups < 1:
            raise ValueError("max_backups must be at least 1")
        self._store = store
        self._session = session
        self._max_backups = max_backups
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def max_backups(self) -> int:
        return self._max_backups

    def create_backup(self) -> Backup | None:
        """Snapshot the current documents; returns ``None`` when both are absent."""

        with self._lock:
            try:
                backup = self._stage_backup()
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                raise PersistenceError("failed to create backup") from exc
        return backup

    def write_document(self, key: str, value: Any) -> None:
        """Back up the current documents, then replace ``key`` with ``value``."""

        if key not in DOCUMENT_KEYS:
            raise InvalidArgument(f"unknown document {key!r}")

        with self._lock:
            try:
                self._stage_backup()
            except SQLAlchemyError as exc:
                self._session.rollback()
                raise PersistenceError("failed to create backup") from exc
            self._store.set(key, value)

    def list_backups(self) -> list[BackupSummary]:
        """Return summaries of all backups, newest first."""

        backups = (
            self._session.query(Backup)
            .order_by(Backup.created_at.desc(), Backup.filename.desc())
            .all()
        )
        return [
            BackupSummary(
                filename=backup.filename,
                size=len(json.dumps(backup_payload(backup)).encode("utf-8")),
                created=backup.created_at,
            )
            for backup in backups
        ]

    def get_backup(self, filename: str) -> Backup:
        """Return the backup named ``filename``."""

        _validate_filename(filename)
        backup = self._session.query(Backup).filter_by(filename=filename).first()
        if backup is None:
            raise NotFound(f"backup {filename} not found")
        return backup

    def restore(self, filename: str) -> Backup:
        """Write back the non-null snapshots of a backup without backing up first."""

        _validate_filename(filename)
        with self._lock:
            backup = self.get_backup(filename)
            restored = []
            for key, snapshot in ((SETTINGS_KEY, backup.settings), (APPDATA_KEY, backup.appdata)):
                if snapshot is None:
                    continue
                self._store.set(key, copy.deepcopy(snapshot), commit=False)
                restored.append(key)
            try:
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                raise PersistenceError(f"failed to restore {filename}") from exc

        logger.info("Restored %s from %s", ", ".join(restored) or "nothing", filename)
        return backup

    def _stage_backup(self) -> Backup | None:
        settings = self._store.get(SETTINGS_KEY)
        appdata = self._store.get(APPDATA_KEY)
        if settings is None and appdata is None:
            return None

        created = self._next_timestamp()
        backup = Backup(
            filename=backup_filename(created),
            settings=copy.deepcopy(settings),
            appdata=copy.deepcopy(appdata),
            created_at=created,
        )
        self._session.add(backup)
        self._session.flush()
        self._prune()
        logger.debug("Staged backup %s", backup.filename)
        return backup

    def _next_timestamp(self) -> datetime:
        created = self._clock()
        latest = (
            self._session.query(Backup.created_at)
            .order_by(Backup.created_at.desc())
            .limit(1)
            .scalar()
        )
        # Keep filenames unique and strictly increasing even if the clock stalls.
        if latest is not None and created <= latest:
            created = latest + timedelta(microseconds=1)
        return created

    def _prune(self) -> None:
        stale = (
            self._session.query(Backup)
            .order_by(Backup.created_at.desc(), Backup.filename.desc())
            .offset(self._max_backups)
            .all()
        )
        for backup in stale:
            self._session.delete(backup)
        if stale:
            self._session.flush()
            logger.info("Evicted %d old backup(s)", len(stale))


def _validate_filename(filename: str) -> None:
    if not isinstance(filename, str) or not FILENAME_PATTERN.fullmatch(filename):
        raise InvalidArgument("invalid backup filename")
