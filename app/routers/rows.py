# File: /app/routers/rows.py | Version: 1.0 | Title: Rows + CSV import router
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.permissions import require_database_access
from app.crud import csv_import as crud_csv
from app.crud import rows as crud_rows
from app.db.session import get_db
from app.models.core_entities import User
from app.schemas import rows as schema_rows
from app.security import get_current_user
from app.storage import BackingStore, get_backing_store

router = APIRouter(prefix="/databases/{database_id}", tags=["Rows"])


@router.get("/rows", response_model=schema_rows.RowsPage)
def get_database_rows(
    database_id: str,
    limit: Optional[int] = None,
    offset: int = 0,
    sort_by: Optional[str] = None,
    sort_order: schema_rows.SortOrder = "asc",
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_rows.get_rows(
        store, record, limit=limit, offset=offset, sort_by=sort_by, sort_order=sort_order
    )


@router.post("/rows", status_code=status.HTTP_201_CREATED)
def add_database_row(
    database_id: str,
    data: schema_rows.RowCreate,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_rows.add_row(db, store, record, cells=data.cells)


@router.patch("/rows/{row_id}", response_model=schema_rows.RowMutationOut)
def update_database_row(
    database_id: str,
    row_id: str,
    data: schema_rows.RowUpdate,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_rows.update_row(
        db,
        store,
        record,
        user_id=current_user.id,
        row_id=row_id,
        cells=data.cells,
        expected_updated_at=data.expected_updated_at,
    )


# POST, not DELETE: the id list travels in the body
@router.post("/rows/delete", response_model=schema_rows.RowsDeleteOut)
def delete_database_rows(
    database_id: str,
    data: schema_rows.RowsDelete,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_rows.delete_rows(db, store, record, user_id=current_user.id, row_ids=data.row_ids)


@router.post("/import-csv", response_model=schema_rows.CsvImportOut)
def import_csv(
    database_id: str,
    data: schema_rows.CsvImportRequest,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_csv.import_csv(
        db,
        store,
        record,
        csv_text=data.csv_text,
        skip_unknown_columns=data.skip_unknown_columns,
    )
