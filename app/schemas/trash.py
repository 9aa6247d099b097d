# File: /app/schemas/trash.py | Version: 1.0 | Title: Trash ledger schemas
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

TrashItemType = Literal["database", "row", "file"]


class TrashItemOut(BaseModel):
    id: str
    item_type: TrashItemType
    item_id: str
    physical_location: str
    display_name: str
    parent_info: Optional[Dict[str, Any]] = None
    deleted_at: datetime
    expires_at: datetime
    days_left: int


class RestoreOut(BaseModel):
    detail: str
    item_type: TrashItemType
    item_id: str


class PurgeOut(BaseModel):
    purged_count: int
    errors: List[str] = []
