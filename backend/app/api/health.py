"""Health check endpoint."""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
def health() -> tuple[dict[str, str], int]:
    """Report ok when the database answers a trivial query."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("Health check failed")
        db.session.rollback()
        return jsonify({"status": "error"}), HTTPStatus.SERVICE_UNAVAILABLE
    return jsonify({"status": "ok"}), HTTPStatus.OK
