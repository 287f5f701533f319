"""Import the JSON files written by the file-based server into the database."""
from __future__ import annotations

import argparse
import json
import pathlib
import sys
from typing import Any

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app import create_app
from backend.app.extensions import db
from backend.app.models.document import APPDATA_KEY, SETTINGS_KEY
from backend.app.models.update import DEFAULT_STAFF, DEFAULT_TYPE, Update
from backend.app.services import Services, get_services
from backend.app.services.feed import parse_day, utc_timestamp
from backend.app.services.photos import is_valid_photo_ref

UPLOADS_PREFIX = "/uploads/"


def _read_json(path: pathlib.Path) -> Any | None:
    if not path.is_file():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _import_documents(services: Services, data_dir: pathlib.Path) -> int:
    """Write the legacy documents directly, without creating backups."""

    imported = 0
    for key, filename in ((SETTINGS_KEY, "settings.json"), (APPDATA_KEY, "appdata.json")):
        value = _read_json(data_dir / filename)
        if value is None:
            continue
        services.documents.set(key, value)
        imported += 1
    return imported


def _import_photo(services: Services, data_dir: pathlib.Path, reference: str | None) -> str | None:
    if not reference or not isinstance(reference, str):
        return None
    name = reference[len(UPLOADS_PREFIX):] if reference.startswith(UPLOADS_PREFIX) else reference
    if not is_valid_photo_ref(name):
        print(f"photo reference {reference!r} is not a plain filename, importing update without it", file=sys.stderr)
        return None
    source = data_dir / "uploads" / name
    if not source.is_file():
        print(f"photo {name} missing, importing update without it", file=sys.stderr)
        return None
    return services.photos.store(source.read_bytes(), name)


def _import_updates(services: Services, data_dir: pathlib.Path) -> tuple[int, int]:
    """Insert legacy updates oldest first so the feed keeps its newest-first order."""

    items = _read_json(data_dir / "updates.json") or []
    if not isinstance(items, list):
        raise RuntimeError("updates.json must contain a list")

    created = 0
    skipped = 0
    for item in reversed(items):
        if not isinstance(item, dict) or not item.get("id"):
            skipped += 1
            continue
        if Update.query.filter_by(id=str(item["id"])).first() is not None:
            skipped += 1
            continue
        db.session.add(
            Update(
                id=str(item["id"]),
                staff=str(item.get("staff") or DEFAULT_STAFF),
                message=str(item.get("message") or ""),
                type=str(item.get("type") or DEFAULT_TYPE),
                day=parse_day(item.get("day")),
                photo=_import_photo(services, data_dir, item.get("photo")),
                timestamp=str(item.get("timestamp") or utc_timestamp()),
            )
        )
        created += 1
    db.session.commit()
    return created, skipped


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("data_dir", type=pathlib.Path, help="directory holding settings.json, appdata.json, updates.json and uploads/")
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        services = get_services()
        documents = _import_documents(services, args.data_dir)
        created, skipped = _import_updates(services, args.data_dir)

        print(
            "Import completed",
            f"documents={documents}",
            f"updates created={created}",
            f"updates skipped={skipped}",
        )


if __name__ == "__main__":
    main()
