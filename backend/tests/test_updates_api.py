"""Tests for the update feed and photo download endpoints."""

from __future__ import annotations

import io

import pytest

from backend.app.errors import NotFound


def _post_update(client, **fields):
    return client.post("/api/updates", data=fields, content_type="multipart/form-data")


def test_create_update_with_defaults(client):
    response = _post_update(client)

    assert response.status_code == 200
    data = response.get_json()
    assert data["ok"] is True
    update = data["update"]
    assert update["staff"] == "Anonymous"
    assert update["message"] == ""
    assert update["type"] == "general"
    assert update["day"] == 0
    assert update["photo"] is None

    listing = client.get("/api/updates").get_json()
    assert listing[0] == update


def test_create_update_from_form_fields(client):
    response = _post_update(client, staff="Bilal", message="Dates delivered", type="logistics", day="3")

    update = response.get_json()["update"]
    assert update["staff"] == "Bilal"
    assert update["message"] == "Dates delivered"
    assert update["type"] == "logistics"
    assert update["day"] == 3


def test_create_update_from_json(client):
    response = client.post("/api/updates", json={"staff": "Hana", "day": 2})

    assert response.status_code == 200
    assert response.get_json()["update"]["day"] == 2


def test_photo_lifecycle(client, services):
    response = _post_update(
        client,
        staff="Zainab",
        photo=(io.BytesIO(b"\xff\xd8fake-jpeg"), "table.JPG"),
    )
    update = response.get_json()["update"]
    assert update["photo"].startswith("/uploads/")
    assert update["photo"].endswith(".jpg")

    download = client.get(update["photo"])
    assert download.status_code == 200
    assert download.data == b"\xff\xd8fake-jpeg"
    assert download.mimetype == "image/jpeg"
    download.close()

    delete = client.delete(f"/api/updates/{update['id']}")
    assert delete.status_code == 200
    assert delete.get_json() == {"ok": True}

    assert client.get("/api/updates").get_json() == []
    assert client.get(update["photo"]).status_code == 404
    with pytest.raises(NotFound):
        services.photos.open(update["photo"].rsplit("/", 1)[-1])


def test_photo_without_extension_defaults_to_jpg(client):
    response = _post_update(client, photo=(io.BytesIO(b"bytes"), "camera-upload"))

    assert response.get_json()["update"]["photo"].endswith(".jpg")


def test_oversized_photo_is_rejected(app, client):
    original = app.config["MAX_PHOTO_SIZE"]
    app.config["MAX_PHOTO_SIZE"] = 4
    try:
        response = _post_update(client, photo=(io.BytesIO(b"0123456789"), "big.jpg"))
    finally:
        app.config["MAX_PHOTO_SIZE"] = original

    assert response.status_code == 413
    assert client.get("/api/updates").get_json() == []


def test_delete_unknown_update_succeeds(client):
    _post_update(client, message="still here")

    response = client.delete("/api/updates/nope")

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert len(client.get("/api/updates").get_json()) == 1


def test_list_updates_fails_open(client, services, monkeypatch):
    def failing_list():
        raise RuntimeError("boom")

    monkeypatch.setattr(services.feed, "list", failing_list)

    response = client.get("/api/updates")

    assert response.status_code == 200
    assert response.get_json() == []


@pytest.mark.parametrize("filename", ["missing.jpg", "..%2Fsecret.txt", ".hidden"])
def test_unknown_upload_returns_404(client, filename):
    assert client.get(f"/uploads/{filename}").status_code == 404


def test_create_update_is_rate_limited(app, client):
    original = app.config["UPDATES_RATE_LIMIT"]
    app.config["UPDATES_RATE_LIMIT"] = "2 per minute"
    try:
        assert _post_update(client).status_code == 200
        assert _post_update(client).status_code == 200
        assert _post_update(client).status_code == 429
    finally:
        app.config["UPDATES_RATE_LIMIT"] = original


def test_out_of_range_day_keeps_photo_owned(client, upload_dir):
    response = _post_update(
        client,
        day="99999999999999999999",
        photo=(io.BytesIO(b"photo-bytes"), "a.jpg"),
    )

    assert response.status_code == 200
    update = response.get_json()["update"]
    assert update["day"] == 0
    photo_name = update["photo"].rsplit("/", 1)[-1]
    assert photo_name in {path.name for path in upload_dir.iterdir()}

    client.delete(f"/api/updates/{update['id']}")
    assert photo_name not in {path.name for path in upload_dir.iterdir()}


@pytest.mark.parametrize("body", ["{oops", "[1, 2]", "null"])
def test_malformed_json_update_is_rejected(client, body):
    response = client.post("/api/updates", data=body, content_type="application/json")

    assert response.status_code == 400
    assert client.get("/api/updates").get_json() == []
