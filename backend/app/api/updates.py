"""REST endpoints for the update feed."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, jsonify, request, url_for

from ..errors import PersistenceError
from ..extensions import limiter
from ..models.update import Update
from ..services import get_services

bp = Blueprint("updates", __name__)


def _update_to_dict(update: Update) -> dict[str, Any]:
    """Serialize an update with its photo reference as a download URL."""

    photo = None
    if update.photo:
        photo = url_for("uploads.get_upload", filename=update.photo)
    return {
        "id": update.id,
        "staff": update.staff,
        "message": update.message,
        "type": update.type,
        "day": update.day,
        "photo": photo,
        "timestamp": update.timestamp,
    }


def _updates_rate_limit() -> str:
    return current_app.config.get("UPDATES_RATE_LIMIT", "30 per minute")


@bp.get("/updates")
def list_updates() -> tuple[object, int]:
    try:
        data = [_update_to_dict(update) for update in get_services().feed.list()]
    except Exception:
        current_app.logger.exception("Failed to list updates")
        data = []
    return jsonify(data), HTTPStatus.OK


@bp.post("/updates")
@limiter.limit(_updates_rate_limit)
def create_update() -> tuple[object, int]:
    if request.is_json:
        fields = request.get_json(silent=True)
        if not isinstance(fields, dict):
            return jsonify({"error": "payload must be a JSON object"}), HTTPStatus.BAD_REQUEST
    else:
        fields = request.form.to_dict()

    photo = None
    photo_filename = None
    upload = request.files.get("photo")
    if upload is not None and upload.filename:
        max_size = int(current_app.config.get("MAX_PHOTO_SIZE", 10 * 1024 * 1024))
        photo = upload.read(max_size + 1)
        if len(photo) > max_size:
            return jsonify({"error": "photo is too large"}), HTTPStatus.REQUEST_ENTITY_TOO_LARGE
        photo_filename = upload.filename

    try:
        update = get_services().feed.insert(fields, photo, photo_filename)
    except PersistenceError as exc:
        current_app.logger.exception("Failed to create update")
        return jsonify({"error": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR

    return jsonify({"ok": True, "update": _update_to_dict(update)}), HTTPStatus.OK


@bp.delete("/updates/<update_id>")
def delete_update(update_id: str) -> tuple[object, int]:
    try:
        get_services().feed.delete(update_id)
    except PersistenceError as exc:
        current_app.logger.exception("Failed to delete update %s", update_id)
        return jsonify({"error": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR
    return jsonify({"ok": True}), HTTPStatus.OK
