# File: /app/models/__init__.py | Version: 2.0 | Title: Models Package Exports
from .core_entities import Document, User
from .database import DatabaseRecord
from .snapshot import Snapshot
from .trash import TrashItem

__all__ = [
    "User",
    "Document",
    "DatabaseRecord",
    "TrashItem",
    "Snapshot",
]
