# File: /app/crud/rows.py | Version: 1.1 | Title: Row store (name-keyed in/out, id-keyed storage)
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Conflict, NotFound, ValidationError
from app.crud import snapshots, trash
from app.crud.databases import column_mapper
from app.models.core_entities import as_utc
from app.models.database import DatabaseRecord
from app.storage.base import BackingStore, PhysicalRow, iso, jsonable_row

log = logging.getLogger(__name__)

# public sort keys -> physical bookkeeping columns
SORT_FIELDS = {
    "_order": "row_order",
    "_created_at": "created_at",
    "_updated_at": "updated_at",
}


def add_row(
    db: Session, store: BackingStore, record: DatabaseRecord, *, cells: Dict[str, Any]
) -> Dict[str, Any]:
    mapper = column_mapper(record)
    by_id, dropped = mapper.to_ids(cells)
    mapper.validate_cells(by_id)
    if dropped:
        log.debug("Dropped unknown cells %s for %s", dropped, record.database_id)

    order = store.max_order(record.database_id) + 1
    [row] = store.insert_rows(
        record.database_id, mapper.column_ids, [{"row_order": order, "cells": by_id}]
    )
    db.commit()
    return mapper.denormalize(row)


def _parse_timestamp(value: str) -> datetime:
    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError as exc:
        raise ValidationError(f"expected_updated_at is not an ISO-8601 timestamp: {value!r}") from exc


def _stale(row_id: str, row: PhysicalRow) -> Conflict:
    return Conflict(f"Row {row_id} was modified at {iso(row['updated_at'])}; reload and retry")


def update_row(
    db: Session,
    store: BackingStore,
    record: DatabaseRecord,
    *,
    user_id: str,
    row_id: str,
    cells: Dict[str, Any],
    expected_updated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Partial merge: only the supplied columns change. The full prior row is
    snapshotted before the write and its token returned with the new row.
    """
    mapper = column_mapper(record)
    by_id, _dropped = mapper.to_ids(cells)
    if not by_id:
        raise ValidationError("None of the supplied cells match a column of this database")
    mapper.validate_cells(by_id)

    current = store.get_row(record.database_id, mapper.column_ids, row_id)
    if current is None:
        raise NotFound(f"Row not found: {row_id}")
    expected = _parse_timestamp(expected_updated_at) if expected_updated_at is not None else None
    if expected is not None and as_utc(current["updated_at"]) != expected:
        raise _stale(row_id, current)

    token = snapshots.save(
        db,
        prior_state=jsonable_row(current),
        entity_type="database_row",
        entity_id=row_id,
        physical_location=record.table_name,
        source_operation="update_database_row",
        operation_kind="update",
        owner_user_id=user_id,
    )
    updated = store.update_row(
        record.database_id, mapper.column_ids, row_id, by_id, expected_updated_at=expected
    )
    if updated is None:
        db.rollback()
        latest = store.get_row(record.database_id, mapper.column_ids, row_id)
        if latest is None:
            raise NotFound(f"Row not found: {row_id}")
        # another writer got in between the check above and the write
        raise _stale(row_id, latest)
    db.commit()
    return {"row": mapper.denormalize(updated), "snapshot_token": token}


def get_rows(
    store: BackingStore,
    record: DatabaseRecord,
    *,
    limit: Optional[int] = None,
    offset: int = 0,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
) -> Dict[str, Any]:
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
    if not 1 <= limit <= settings.MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {settings.MAX_PAGE_SIZE}")
    if offset < 0:
        raise ValidationError("offset must not be negative")
    # column names (or anything else) sort by row position in the requested direction
    field = SORT_FIELDS.get(sort_by or "_order", "row_order")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sort_order must be 'asc' or 'desc'")

    mapper = column_mapper(record)
    rows = store.select_rows(
        record.database_id,
        mapper.column_ids,
        limit=limit,
        offset=offset,
        order_by=field,
        descending=sort_order == "desc",
    )
    return {
        "rows": [mapper.denormalize(r) for r in rows],
        "total_count": store.count_rows(record.database_id),
        "limit": limit,
        "offset": offset,
    }


def delete_rows(
    db: Session,
    store: BackingStore,
    record: DatabaseRecord,
    *,
    user_id: str,
    row_ids: List[str],
) -> Dict[str, Any]:
    return trash.soft_delete_rows(db, store, record, user_id=user_id, row_ids=row_ids)
