# File: /app/crud/snapshots.py | Version: 1.0 | Title: Append-only snapshot log (save before mutate, restore returns data)
from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import BackingStoreError, NotFound
from app.models.core_entities import as_utc
from app.models.snapshot import Snapshot

log = logging.getLogger(__name__)

OPERATION_KINDS = ("update", "soft_delete")


def new_token(entity_id: str) -> str:
    """snap_<first 12 chars of the id without dashes>_<epoch ms>_<6 hex>"""
    short = entity_id.replace("-", "")[:12]
    return f"snap_{short}_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def save(
    db: Session,
    *,
    prior_state: Any,
    entity_type: str,
    entity_id: str,
    physical_location: Optional[str],
    source_operation: str,
    operation_kind: str,
    owner_user_id: str,
) -> str:
    """
    Persist the state an entity had before a mutation and return its token.

    Commits immediately. If the write fails the caller must not go on with
    the mutation, so the failure surfaces as BackingStoreError.
    """
    if operation_kind not in OPERATION_KINDS:
        raise ValueError(f"Unknown operation kind: {operation_kind}")
    token = new_token(entity_id)
    db.add(
        Snapshot(
            token=token,
            entity_type=entity_type,
            entity_id=entity_id,
            physical_location=physical_location,
            source_operation=source_operation,
            operation_kind=operation_kind,
            prior_state=prior_state,
            owner_user_id=owner_user_id,
        )
    )
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("Snapshot save failed for %s %s", entity_type, entity_id, exc_info=exc)
        raise BackingStoreError(
            f"Snapshot could not be saved for {entity_type} {entity_id}; nothing was changed"
        ) from exc
    log.debug("Saved snapshot %s (%s %s, %s)", token, entity_type, entity_id, source_operation)
    return token


def _summary(snap: Snapshot) -> Dict[str, Any]:
    return {
        "token": snap.token,
        "entity_type": snap.entity_type,
        "entity_id": snap.entity_id,
        "physical_location": snap.physical_location,
        "source_operation": snap.source_operation,
        "operation_kind": snap.operation_kind,
        "captured_at": as_utc(snap.captured_at),
    }


def restore(db: Session, *, token: str, user_id: str) -> Dict[str, Any]:
    """Return the captured prior state. Nothing is written back."""
    snap = db.get(Snapshot, token)
    if snap is None or snap.owner_user_id != user_id:
        raise NotFound(f"Snapshot not found: {token}")
    return {**_summary(snap), "prior_state": snap.prior_state}


def list_snapshots(
    db: Session,
    *,
    user_id: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    q = db.query(Snapshot).filter(Snapshot.owner_user_id == user_id)
    if entity_type:
        q = q.filter(Snapshot.entity_type == entity_type)
    if entity_id:
        q = q.filter(Snapshot.entity_id == entity_id)
    snaps = q.order_by(Snapshot.captured_at.desc(), Snapshot.token.desc()).limit(limit).all()
    return [_summary(s) for s in snaps]
