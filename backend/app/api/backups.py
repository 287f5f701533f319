"""REST endpoints for listing, downloading and restoring backups."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify

from ..errors import InvalidArgument, NotFound, PersistenceError
from ..services import get_services
from ..services.backups import backup_payload

bp = Blueprint("backups", __name__)


@bp.get("/backups")
def list_backups() -> tuple[object, int]:
    try:
        summaries = get_services().backups.list_backups()
    except Exception:
        current_app.logger.exception("Failed to list backups")
        summaries = []
    return jsonify([summary.to_dict() for summary in summaries]), HTTPStatus.OK


@bp.get("/backups/<path:filename>")
def get_backup(filename: str) -> tuple[object, int]:
    try:
        backup = get_services().backups.get_backup(filename)
    except InvalidArgument as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST
    except NotFound as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.NOT_FOUND
    return jsonify(backup_payload(backup)), HTTPStatus.OK


@bp.post("/backups/restore/<path:filename>")
def restore_backup(filename: str) -> tuple[object, int]:
    try:
        get_services().backups.restore(filename)
    except InvalidArgument as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST
    except NotFound as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.NOT_FOUND
    except PersistenceError as exc:
        current_app.logger.exception("Failed to restore %s", filename)
        return jsonify({"error": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR
    return jsonify({"ok": True}), HTTPStatus.OK
