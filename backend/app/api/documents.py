"""REST endpoints for the settings and appdata documents."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..errors import PersistenceError
from ..models.document import APPDATA_KEY, SETTINGS_KEY
from ..services import get_services

bp = Blueprint("documents", __name__)


def _read_document(key: str):
    try:
        value = get_services().documents.get(key)
    except Exception:
        current_app.logger.exception("Failed to read %s", key)
        value = None
    return jsonify(value), HTTPStatus.OK


def _write_document(key: str):
    if not request.is_json:
        return jsonify({"error": "request body must be JSON"}), HTTPStatus.BAD_REQUEST
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"error": "request body must be JSON"}), HTTPStatus.BAD_REQUEST

    try:
        get_services().backups.write_document(key, payload)
    except PersistenceError as exc:
        current_app.logger.exception("Failed to write %s", key)
        return jsonify({"error": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR

    return jsonify({"ok": True}), HTTPStatus.OK


@bp.get("/settings")
def get_settings() -> tuple[object, int]:
    return _read_document(SETTINGS_KEY)


@bp.post("/settings")
def save_settings() -> tuple[object, int]:
    return _write_document(SETTINGS_KEY)


@bp.get("/data")
def get_appdata() -> tuple[object, int]:
    return _read_document(APPDATA_KEY)


@bp.post("/data")
def save_appdata() -> tuple[object, int]:
    return _write_document(APPDATA_KEY)
