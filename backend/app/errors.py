"""Error taxonomy shared by the storage services."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for errors raised by the document, backup, photo and feed stores."""


class NotFound(StoreError):
    """Raised when a backup, photo or update does not exist."""


class InvalidArgument(StoreError):
    """Raised when an identifier is malformed and is rejected before any lookup."""


class PersistenceError(StoreError):
    """Raised when the underlying storage fails to persist a write."""


__all__ = ["StoreError", "NotFound", "InvalidArgument", "PersistenceError"]
