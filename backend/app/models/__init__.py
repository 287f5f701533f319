"""Database models for the Iftar Desk backend."""

from .backup import Backup
from .document import Document
from .update import Update

__all__ = ["Backup", "Document", "Update"]
