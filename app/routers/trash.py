# File: /app/routers/trash.py | Version: 1.0 | Title: Trash router (list / restore / permanent delete / purge)
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.crud import trash as crud_trash
from app.db.session import get_db
from app.models.core_entities import User
from app.schemas import trash as schema_trash
from app.security import get_current_user
from app.storage import BackingStore, get_backing_store

router = APIRouter(prefix="/trash", tags=["Trash"])


@router.get("", response_model=List[schema_trash.TrashItemOut])
def list_trash(
    item_type: Optional[schema_trash.TrashItemType] = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_trash.list_trash(db, user_id=current_user.id, item_type=item_type, limit=limit)


@router.delete("", response_model=schema_trash.PurgeOut)
def empty_trash(
    confirm: bool = False,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    return crud_trash.empty_trash(db, store, user_id=current_user.id, confirm=confirm)


@router.post("/purge", response_model=schema_trash.PurgeOut)
def purge_expired(
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    """Hard-delete the caller's items whose retention window has elapsed."""
    return crud_trash.purge_expired(db, store, owner_user_id=current_user.id)


@router.post("/{trash_id}/restore", response_model=schema_trash.RestoreOut)
def restore_from_trash(
    trash_id: str,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    return crud_trash.restore(db, store, trash_id=trash_id, user_id=current_user.id)


@router.delete("/{trash_id}", response_model=schema_trash.PurgeOut)
def permanent_delete_from_trash(
    trash_id: str,
    confirm: bool = False,
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    return crud_trash.permanent_delete(
        db, store, trash_id=trash_id, user_id=current_user.id, confirm=confirm
    )
