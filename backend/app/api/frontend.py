"""Delivery of the single-page front-end and its PWA files."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, send_from_directory

bp = Blueprint("frontend", __name__)


def _send(filename: str, max_age: int | None = None) -> Response:
    return send_from_directory(current_app.config["STATIC_FOLDER"], filename, max_age=max_age)


@bp.get("/")
@bp.get("/index.html")
def index() -> Response:
    return _send("index.html", max_age=0)


@bp.get("/manifest.json")
def manifest() -> Response:
    return _send("manifest.json")


@bp.get("/sw.js")
def service_worker() -> Response:
    # The browser must always revalidate the worker script to pick up new caches.
    response = _send("sw.js", max_age=0)
    response.headers["Cache-Control"] = "no-cache"
    return response
