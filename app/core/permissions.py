# File: /app/core/permissions.py | Version: 2.0 | Title: Access gate for user-defined databases
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AccessDenied, NotFound
from app.models.core_entities import Document
from app.models.database import DatabaseRecord

log = logging.getLogger(__name__)


def authorize(db: Session, *, user_id: str, database_id: str) -> bool:
    """
    True iff the user may read and write the database:
      - standalone database (no owning document) -> allowed
      - embedded in a document -> the document's owner only
    Any lookup failure denies.
    """
    try:
        found = db.execute(
            select(DatabaseRecord.document_id, Document.owner_id)
            .outerjoin(Document, Document.id == DatabaseRecord.document_id)
            .where(DatabaseRecord.database_id == database_id)
        ).first()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("Access lookup failed for database %s", database_id, exc_info=exc)
        return False

    if found is None:
        return False
    if found.document_id is None:
        return True
    return found.owner_id == user_id


def require_database_access(
    db: Session,
    *,
    user_id: str,
    database_id: str,
    allow_deleted: bool = False,
) -> DatabaseRecord:
    """
    Gate every database-scoped entry point. Returns the registry record.
    Raises NotFound for unknown (or soft-deleted) databases and AccessDenied
    otherwise when the caller is not authorized.
    """
    record = db.get(DatabaseRecord, database_id)
    if record is None:
        raise NotFound(f"Database not found: {database_id}")
    if not authorize(db, user_id=user_id, database_id=database_id):
        log.warning("Access denied: user %s on database %s", user_id, database_id)
        raise AccessDenied("Access denied: you do not have permission to access this database")
    if record.deleted_at is not None and not allow_deleted:
        raise NotFound(f"Database not found: {database_id}")
    return record
