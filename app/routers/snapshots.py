# File: /app/routers/snapshots.py | Version: 1.0 | Title: Snapshot log router (read-only)
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.crud import snapshots as crud_snap
from app.db.session import get_db
from app.models.core_entities import User
from app.schemas import snapshots as schema_snap
from app.security import get_current_user

router = APIRouter(prefix="/snapshots", tags=["Snapshots"])


@router.get("", response_model=List[schema_snap.SnapshotSummaryOut])
def list_snapshots(
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_snap.list_snapshots(
        db, user_id=current_user.id, entity_type=entity_type, entity_id=entity_id, limit=limit
    )


@router.get("/{token}", response_model=schema_snap.SnapshotOut)
def restore_snapshot(
    token: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Returns the captured prior state. Applying it is up to the caller."""
    return crud_snap.restore(db, token=token, user_id=current_user.id)
