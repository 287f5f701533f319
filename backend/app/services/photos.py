"""Storage for photos attached to update records."""

from __future__ import annotations

import contextlib
import os
import re
import secrets
import tempfile
import time
from pathlib import Path
from typing import Any, BinaryIO, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from ..errors import NotFound

DEFAULT_EXTENSION = ".jpg"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_EXTENSION_PATTERN = re.compile(r"\.[a-z0-9]{1,10}")
_PHOTO_REF_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]*(\.[A-Za-z0-9]+)?")


def random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_photo_filename(suggested_filename: str | None = None) -> str:
    """Return ``<epoch-ms>-<random><ext>`` keeping the uploaded file's extension."""

    _, extension = os.path.splitext(secure_filename(suggested_filename or ""))
    extension = extension.lower()
    if not _EXTENSION_PATTERN.fullmatch(extension):
        extension = DEFAULT_EXTENSION
    return f"{int(time.time() * 1000)}-{random_base36(6)}{extension}"


def is_valid_photo_ref(photo_ref: object) -> bool:
    return isinstance(photo_ref, str) and _PHOTO_REF_PATTERN.fullmatch(photo_ref) is not None


class PhotoStore(Protocol):
    """Defines the operations the update feed needs from photo storage."""

    def store(self, data: bytes, suggested_filename: str | None = None) -> str:
        ...

    def open(self, photo_ref: str) -> BinaryIO:
        ...

    def delete(self, photo_ref: str) -> None:
        ...


class LocalPhotoStore:
    """Keeps photos as files in a single uploads directory."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def store(self, data: bytes, suggested_filename: str | None = None) -> str:
        photo_ref = generate_photo_filename(suggested_filename)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_path, self.directory / photo_ref)
        except OSError:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise
        return photo_ref

    def open(self, photo_ref: str) -> BinaryIO:
        path = self._path(photo_ref)
        try:
            return open(path, "rb")
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise NotFound(f"photo {photo_ref} not found") from exc

    def delete(self, photo_ref: str) -> None:
        try:
            os.unlink(self._path(photo_ref))
        except (FileNotFoundError, NotFound):
            return

    def _path(self, photo_ref: str) -> str:
        path = safe_join(str(self.directory), photo_ref) if is_valid_photo_ref(photo_ref) else None
        if path is None:
            raise NotFound(f"photo {photo_ref} not found")
        return path


class S3PhotoStore:
    """Keeps photos as objects in an S3-compatible bucket."""

    def __init__(self, bucket: str, prefix: str = "", client: Any = None) -> None:
        self.bucket = bucket
        self.prefix = prefix
        self._client = client

    @classmethod
    def from_config(
        cls,
        bucket: str,
        prefix: str = "",
        endpoint_url: str | None = None,
        region: str | None = None,
    ) -> "S3PhotoStore":
        client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            config=BotoConfig(signature_version="s3v4"),
        )
        return cls(bucket, prefix=prefix, client=client)

    def store(self, data: bytes, suggested_filename: str | None = None) -> str:
        photo_ref = generate_photo_filename(suggested_filename)
        self._client.put_object(Bucket=self.bucket, Key=self._key(photo_ref), Body=data)
        return photo_ref

    def open(self, photo_ref: str) -> BinaryIO:
        if not is_valid_photo_ref(photo_ref):
            raise NotFound(f"photo {photo_ref} not found")
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=self._key(photo_ref))
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"NoSuchKey", "404"}:
                raise NotFound(f"photo {photo_ref} not found") from exc
            raise
        return response["Body"]

    def delete(self, photo_ref: str) -> None:
        if not is_valid_photo_ref(photo_ref):
            return
        # DeleteObject succeeds for missing keys.
        self._client.delete_object(Bucket=self.bucket, Key=self._key(photo_ref))

    def _key(self, photo_ref: str) -> str:
        return f"{self.prefix}{photo_ref}"
