"""Download endpoint for stored update photos."""

from __future__ import annotations

import mimetypes
from http import HTTPStatus

from flask import Blueprint, Response, jsonify, send_file

from ..errors import NotFound
from ..services import get_services

bp = Blueprint("uploads", __name__)


@bp.get("/uploads/<path:filename>")
def get_upload(filename: str) -> Response | tuple[object, int]:
    try:
        stream = get_services().photos.open(filename)
    except NotFound:
        return jsonify({"error": "photo not found"}), HTTPStatus.NOT_FOUND

    mimetype = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return send_file(stream, mimetype=mimetype, download_name=filename)
