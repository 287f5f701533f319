"""Key to JSON document persistence with whole-value upsert semantics."""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import PersistenceError
from ..models.document import Document


class DocumentStore:
    """Reads and replaces the opaque JSON documents kept in the ``documents`` table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, key: str) -> Any | None:
        """Return the stored value for ``key`` or ``None`` if it was never written."""

        document = self._session.get(Document, key)
        if document is None:
            return None
        return document.value

    def set(self, key: str, value: Any, commit: bool = True) -> None:
        """Replace the value stored under ``key``.

        With ``commit=False`` the change is only flushed so a caller can fold it
        into a larger transaction.
        """

        try:
            document = self._session.get(Document, key)
            if document is None:
                self._session.add(Document(key=key, value=value))
            else:
                document.value = value
            if commit:
                self._session.commit()
            else:
                self._session.flush()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"failed to write document {key!r}") from exc
