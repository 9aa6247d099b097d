# File: /app/storage/__init__.py | Version: 1.0 | Title: Backing store package + request dependency
from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.storage.base import BackingStore, PhysicalRow
from app.storage.sql_store import SqlBackingStore


def get_backing_store(db: Session = Depends(get_db)) -> BackingStore:
    """One store per request, sharing the request's Session."""
    return SqlBackingStore(db)


__all__ = ["BackingStore", "PhysicalRow", "SqlBackingStore", "get_backing_store"]
