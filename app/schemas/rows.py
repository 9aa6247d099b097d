# File: /app/schemas/rows.py | Version: 1.0 | Title: Row payloads (name-keyed cells)
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SortOrder = Literal["asc", "desc"]


class RowCreate(BaseModel):
    cells: Dict[str, Any] = Field(default_factory=dict)


class RowUpdate(BaseModel):
    cells: Dict[str, Any]
    # Optimistic concurrency: the _updated_at value the caller last read
    expected_updated_at: Optional[str] = None


class RowsDelete(BaseModel):
    row_ids: List[str] = Field(min_length=1)


class RowsPage(BaseModel):
    total_count: int
    limit: int
    offset: int
    # {"_id", "_order", "_created_at", "_updated_at", "<column name>": value, ...}
    rows: List[Dict[str, Any]]


class RowMutationOut(BaseModel):
    row: Dict[str, Any]
    snapshot_token: Optional[str] = None


class RowsDeleteOut(BaseModel):
    deleted_count: int
    snapshot_tokens: List[str]


class CsvImportRequest(BaseModel):
    csv_text: str = Field(min_length=1)
    skip_unknown_columns: bool = True


class CsvImportOut(BaseModel):
    imported_count: int
    skipped_columns: List[str]
    first_order: int
    last_order: int
