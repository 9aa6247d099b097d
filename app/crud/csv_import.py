# File: /app/crud/csv_import.py | Version: 1.1 | Title: CSV import (validate everything in memory, then one batched insert)
from __future__ import annotations

import csv
import io
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.crud.databases import column_mapper
from app.models.database import DatabaseRecord
from app.storage.base import BackingStore

log = logging.getLogger(__name__)


def _parse(csv_text: str) -> List[List[str]]:
    reader = csv.reader(io.StringIO(csv_text.lstrip("\ufeff")))
    try:
        return [r for r in reader if any(field.strip() for field in r)]
    except csv.Error as exc:
        raise ValidationError(f"Malformed CSV: {exc}") from exc


def import_csv(
    db: Session,
    store: BackingStore,
    record: DatabaseRecord,
    *,
    csv_text: str,
    skip_unknown_columns: bool = True,
) -> Dict[str, Any]:
    """
    Headers are matched to column names case-sensitively. With
    skip_unknown_columns=False any unmatched header rejects the whole file
    and nothing is written. Values are kept as strings; empty ones become null.
    """
    records = _parse(csv_text)
    if not records:
        raise ValidationError("CSV is empty: a header row is required")
    header = [h.strip() for h in records[0]]
    data = records[1:]
    if not data:
        raise ValidationError("CSV has a header row but no data rows")

    named = [h for h in header if h]
    duplicates = sorted({h for h in named if named.count(h) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate CSV headers: {', '.join(duplicates)}")

    mapper = column_mapper(record)
    matched: Dict[int, str] = {}
    skipped: List[str] = []
    for idx, name in enumerate(header):
        if not name:
            continue
        col = mapper.column_by_name(name)
        if col is None:
            skipped.append(name)
        else:
            matched[idx] = col["id"]

    if skipped and not skip_unknown_columns:
        raise ValidationError(
            f"CSV headers do not match any column: {', '.join(skipped)}. "
            "Nothing was imported"
        )
    if not matched:
        raise ValidationError("None of the CSV headers match a column of this database")

    start = store.max_order(record.database_id) + 1
    rows = []
    for n, values in enumerate(data, start=1):
        # fields past the header are ignored, missing ones read as empty
        cells: Dict[str, Any] = {}
        for idx, column_id in matched.items():
            raw = values[idx].strip() if idx < len(values) else ""
            cells[column_id] = raw or None
        mapper.validate_cells(cells, where=f"CSV row {n}")
        rows.append({"row_order": start + n - 1, "cells": cells})

    store.insert_rows(record.database_id, mapper.column_ids, rows)
    db.commit()
    log.info(
        "Imported %d CSV row(s) into %s (skipped columns: %s)",
        len(rows),
        record.database_id,
        skipped or "none",
    )
    return {
        "imported_count": len(rows),
        "skipped_columns": skipped,
        "first_order": start,
        "last_order": start + len(rows) - 1,
    }
