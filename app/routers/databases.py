# File: /app/routers/databases.py | Version: 1.0 | Title: Databases + columns router
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.permissions import require_database_access
from app.crud import databases as crud_db
from app.db.session import get_db
from app.models.core_entities import User
from app.schemas import databases as schema_db
from app.security import get_current_user
from app.storage import BackingStore, get_backing_store

router = APIRouter(prefix="/databases", tags=["Databases"])


@router.get("", response_model=List[schema_db.DatabaseSummaryOut])
def list_databases(
    document_id: Optional[str] = None,
    kind: Optional[schema_db.DatabaseKind] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_db.list_databases(db, user_id=current_user.id, document_id=document_id, kind=kind)


@router.post("", response_model=schema_db.DatabaseSchemaOut, status_code=status.HTTP_201_CREATED)
def create_database(
    data: schema_db.DatabaseCreate,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    record = crud_db.create_database(
        db,
        store,
        user_id=current_user.id,
        name=data.name,
        kind=data.kind,
        document_id=data.document_id,
        columns=data.columns,
    )
    return crud_db.schema_payload(record)


@router.get("/{database_id}", response_model=schema_db.DatabaseSchemaOut)
def get_database_schema(
    database_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_db.schema_payload(record)


@router.delete("/{database_id}", response_model=schema_db.DatabaseDeleteOut)
def delete_database(
    database_id: str,
    confirm: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_db.delete_database(db, record, user_id=current_user.id, confirm=confirm)


# ---- Columns ----


@router.post(
    "/{database_id}/columns",
    response_model=schema_db.ColumnOut,
    status_code=status.HTTP_201_CREATED,
)
def add_column(
    database_id: str,
    data: schema_db.ColumnCreate,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_db.add_column(
        db,
        store,
        record,
        user_id=current_user.id,
        name=data.name,
        col_type=data.type,
        options=data.options,
    )


@router.patch("/{database_id}/columns/{column_id}", response_model=schema_db.ColumnOut)
def update_column(
    database_id: str,
    column_id: str,
    data: schema_db.ColumnUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    return crud_db.update_column(
        db, record, column_id, user_id=current_user.id, **data.model_dump(exclude_unset=True)
    )


@router.delete("/{database_id}/columns/{column_id}", response_model=schema_db.ColumnDeleteOut)
def delete_column(
    database_id: str,
    column_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    record = require_database_access(db, user_id=current_user.id, database_id=database_id)
    column = crud_db.delete_column(db, record, column_id, user_id=current_user.id)
    return {"detail": f"Column '{column['name']}' deleted", "column": column}
