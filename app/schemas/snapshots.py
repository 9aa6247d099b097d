# File: /app/schemas/snapshots.py | Version: 1.0 | Title: Snapshot schemas
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class SnapshotSummaryOut(BaseModel):
    token: str
    entity_type: str
    entity_id: str
    physical_location: Optional[str] = None
    source_operation: str
    operation_kind: str
    captured_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SnapshotOut(SnapshotSummaryOut):
    prior_state: Any
