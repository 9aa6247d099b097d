# File: /app/crud/trash.py | Version: 1.0 | Title: Soft delete, trash ledger, restore and purge
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConfirmationRequired, DataStoreError, NotFound, ValidationError
from app.crud import snapshots
from app.crud.databases import REGISTRY_TABLE, ColumnMapper, column_mapper, record_state
from app.models.core_entities import as_utc, utcnow
from app.models.database import DatabaseRecord
from app.models.snapshot import Snapshot
from app.models.trash import TrashItem
from app.storage.base import BackingStore, PhysicalRow, jsonable_row
from app.storage.naming import physical_table_name

log = logging.getLogger(__name__)

TITLE_COLUMNS = ("Title", "Name")
UNTITLED = "Untitled"

# rows go before the databases that may contain them
_PURGE_ORDER = {"row": 0, "file": 1, "database": 2}


def _expiry(deleted_at: datetime) -> datetime:
    return deleted_at + timedelta(days=settings.TRASH_RETENTION_DAYS)


def row_display_name(mapper: ColumnMapper, row: PhysicalRow) -> str:
    cells = row.get("cells") or {}
    for name in TITLE_COLUMNS:
        col = mapper.column_by_name(name)
        if col is not None:
            value = cells.get(col["id"])
            if isinstance(value, str) and value.strip():
                return value.strip()[:255]
    for col in mapper.columns:
        value = cells.get(col["id"])
        if isinstance(value, str) and value.strip():
            return value.strip()[:255]
    return UNTITLED


# ---- Soft delete ----


def soft_delete_rows(
    db: Session,
    store: BackingStore,
    record: DatabaseRecord,
    *,
    user_id: str,
    row_ids: Sequence[str],
) -> Dict[str, Any]:
    mapper = column_mapper(record)
    ids = list(dict.fromkeys(row_ids))
    if not ids:
        raise ValidationError("row_ids must not be empty")

    rows = []
    for row_id in ids:
        row = store.get_row(record.database_id, mapper.column_ids, row_id)
        if row is None:
            raise NotFound(f"Row not found: {row_id}")
        rows.append(row)

    tokens = [
        snapshots.save(
            db,
            prior_state=jsonable_row(row),
            entity_type="database_row",
            entity_id=row["id"],
            physical_location=record.table_name,
            source_operation="delete_database_rows",
            operation_kind="soft_delete",
            owner_user_id=user_id,
        )
        for row in rows
    ]

    now = utcnow()
    store.set_deleted_at(record.database_id, ids, now)
    for row in rows:
        db.add(
            TrashItem(
                item_type="row",
                item_id=row["id"],
                physical_location=record.table_name,
                display_name=row_display_name(mapper, row),
                parent_info={"database_id": record.database_id, "database_name": record.name},
                owner_user_id=user_id,
                deleted_at=now,
                expires_at=_expiry(now),
            )
        )
    db.commit()
    log.info("Moved %d row(s) of %s to trash", len(rows), record.database_id)
    return {"deleted_count": len(rows), "snapshot_tokens": tokens}


def soft_delete_database(db: Session, record: DatabaseRecord, *, user_id: str) -> Dict[str, Any]:
    """Only the registry record is flagged; rows stay untouched."""
    token = snapshots.save(
        db,
        prior_state=record_state(record),
        entity_type="database",
        entity_id=record.database_id,
        physical_location=REGISTRY_TABLE,
        source_operation="delete_database",
        operation_kind="soft_delete",
        owner_user_id=user_id,
    )
    now = utcnow()
    record.deleted_at = now
    item = TrashItem(
        item_type="database",
        item_id=record.database_id,
        physical_location=REGISTRY_TABLE,
        display_name=record.name[:255] or UNTITLED,
        parent_info={"document_id": record.document_id},
        owner_user_id=user_id,
        deleted_at=now,
        expires_at=_expiry(now),
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    log.info("Moved database %s (%s) to trash", record.database_id, record.name)
    return {
        "detail": f"Database '{record.name}' moved to trash",
        "database_id": record.database_id,
        "trash_id": item.id,
        "snapshot_token": token,
    }


# ---- Ledger ----


def _payload(item: TrashItem, now: datetime) -> Dict[str, Any]:
    expires_at = as_utc(item.expires_at)
    remaining = (expires_at - now).total_seconds()
    return {
        "id": item.id,
        "item_type": item.item_type,
        "item_id": item.item_id,
        "physical_location": item.physical_location,
        "display_name": item.display_name,
        "parent_info": item.parent_info,
        "deleted_at": as_utc(item.deleted_at),
        "expires_at": expires_at,
        "days_left": max(0, math.ceil(remaining / 86400)),
    }


def list_trash(
    db: Session,
    *,
    user_id: str,
    item_type: Optional[str] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    q = db.query(TrashItem).filter(TrashItem.owner_user_id == user_id)
    if item_type:
        q = q.filter(TrashItem.item_type == item_type)
    items = q.order_by(TrashItem.deleted_at.desc()).limit(limit).all()
    now = utcnow()
    return [_payload(i, now) for i in items]


def _owned_item(db: Session, trash_id: str, user_id: str) -> TrashItem:
    item = db.get(TrashItem, trash_id)
    if item is None or item.owner_user_id != user_id:
        raise NotFound(f"Trash item not found: {trash_id}")
    return item


def restore(db: Session, store: BackingStore, *, trash_id: str, user_id: str) -> Dict[str, Any]:
    item = _owned_item(db, trash_id, user_id)

    if item.item_type == "row":
        database_id = (item.parent_info or {}).get("database_id")
        record = db.get(DatabaseRecord, database_id) if database_id else None
        if record is None:
            raise NotFound(f"Database of this row no longer exists: {database_id}")
        if record.deleted_at is not None:
            raise ValidationError(
                f"Database '{record.name}' is in the trash; restore it before its rows"
            )
        store.set_deleted_at(record.database_id, [item.item_id], None)
    elif item.item_type == "database":
        record = db.get(DatabaseRecord, item.item_id)
        if record is None:
            raise NotFound(f"Database no longer exists: {item.item_id}")
        record.deleted_at = None
    else:
        raise ValidationError(f"Items of type '{item.item_type}' cannot be restored here")

    result = {
        "detail": f"Restored {item.item_type} '{item.display_name}'",
        "item_type": item.item_type,
        "item_id": item.item_id,
    }
    db.delete(item)
    db.commit()
    log.info("Restored %s %s from trash", item.item_type, item.item_id)
    return result


# ---- Purge ----


def _hard_delete(db: Session, store: BackingStore, item: TrashItem) -> None:
    if item.item_type == "row":
        database_id = (item.parent_info or {}).get("database_id")
        if database_id and db.get(DatabaseRecord, database_id) is not None:
            store.delete_rows(database_id, [item.item_id])
        db.query(Snapshot).filter(Snapshot.entity_id == item.item_id).delete(
            synchronize_session=False
        )
    elif item.item_type == "database":
        table_name = physical_table_name(item.item_id)
        store.drop_table(item.item_id)
        db.query(TrashItem).filter(
            TrashItem.item_type == "row", TrashItem.physical_location == table_name
        ).delete(synchronize_session=False)
        db.query(Snapshot).filter(
            or_(Snapshot.entity_id == item.item_id, Snapshot.physical_location == table_name)
        ).delete(synchronize_session=False)
        record = db.get(DatabaseRecord, item.item_id)
        if record is not None:
            db.delete(record)
    db.delete(item)


def _purge(db: Session, store: BackingStore, items: List[TrashItem]) -> Dict[str, Any]:
    purged = 0
    errors: List[str] = []
    for item in sorted(items, key=lambda i: _PURGE_ORDER.get(i.item_type, 1)):
        kind, item_id = item.item_type, item.item_id
        try:
            _hard_delete(db, store, item)
            db.commit()
            purged += 1
            continue
        except (DataStoreError, SQLAlchemyError) as exc:
            db.rollback()
            log.error("Purge of %s %s failed", kind, item_id, exc_info=exc)
            errors.append(f"{kind} {item_id}: {exc}")

        # the ledger entry goes even when the entity could not be removed
        try:
            db.delete(item)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("Could not drop trash entry for %s %s", kind, item_id, exc_info=exc)

    log.info("Purged %d trash item(s), %d error(s)", purged, len(errors))
    return {"purged_count": purged, "errors": errors}


def permanent_delete(
    db: Session, store: BackingStore, *, trash_id: str, user_id: str, confirm: bool
) -> Dict[str, Any]:
    if not confirm:
        raise ConfirmationRequired("Permanent deletion requires confirm=true")
    item = _owned_item(db, trash_id, user_id)
    return _purge(db, store, [item])


def empty_trash(db: Session, store: BackingStore, *, user_id: str, confirm: bool) -> Dict[str, Any]:
    if not confirm:
        raise ConfirmationRequired("Emptying the trash requires confirm=true")
    items = db.query(TrashItem).filter(TrashItem.owner_user_id == user_id).all()
    return _purge(db, store, items)


def purge_expired(
    db: Session,
    store: BackingStore,
    *,
    now: Optional[datetime] = None,
    owner_user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Hard-delete everything whose retention window has elapsed."""
    now = now or utcnow()
    q = db.query(TrashItem).filter(TrashItem.expires_at <= now)
    if owner_user_id:
        q = q.filter(TrashItem.owner_user_id == owner_user_id)
    return _purge(db, store, q.all())
