# File: /app/schemas/tools.py | Version: 1.0 | Title: Argument models for the named operation catalogue
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.databases import ColumnCreate, ColumnUpdate, DatabaseCreate, DatabaseKind
from app.schemas.rows import CsvImportRequest, SortOrder
from app.schemas.trash import TrashItemType


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DatabaseArgs(ToolArgs):
    database_id: str = Field(min_length=1)


# ---- Schema ----


class ListDatabasesArgs(ToolArgs):
    document_id: Optional[str] = None
    kind: Optional[DatabaseKind] = None


class CreateDatabaseArgs(DatabaseCreate, ToolArgs):
    pass


class DeleteDatabaseArgs(DatabaseArgs):
    confirm: bool = False


class GetDatabaseSchemaArgs(DatabaseArgs):
    pass


class AddColumnArgs(ColumnCreate, DatabaseArgs):
    pass


class UpdateColumnArgs(ColumnUpdate, DatabaseArgs):
    column_id: str = Field(min_length=1)


class DeleteColumnArgs(DatabaseArgs):
    column_id: str = Field(min_length=1)


# ---- Rows ----


class GetDatabaseRowsArgs(DatabaseArgs):
    limit: Optional[int] = None
    offset: int = 0
    sort_by: Optional[str] = None
    sort_order: SortOrder = "asc"


class AddDatabaseRowArgs(DatabaseArgs):
    cells: Dict[str, Any] = Field(default_factory=dict)


class UpdateDatabaseRowArgs(DatabaseArgs):
    row_id: str = Field(min_length=1)
    cells: Dict[str, Any]
    expected_updated_at: Optional[str] = None


class DeleteDatabaseRowsArgs(DatabaseArgs):
    row_ids: List[str] = Field(min_length=1)


class ImportCsvArgs(CsvImportRequest, DatabaseArgs):
    pass


# ---- Trash / snapshots ----


class ListTrashArgs(ToolArgs):
    item_type: Optional[TrashItemType] = None
    limit: int = Field(default=50, ge=1, le=200)


class RestoreFromTrashArgs(ToolArgs):
    trash_id: str = Field(min_length=1)


class PermanentDeleteFromTrashArgs(RestoreFromTrashArgs):
    confirm: bool = False


class EmptyTrashArgs(ToolArgs):
    confirm: bool = False


class ListSnapshotsArgs(ToolArgs):
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=200)


class RestoreSnapshotArgs(ToolArgs):
    token: str = Field(min_length=1)


class ToolInfo(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]


class ToolResult(BaseModel):
    tool: str
    result: Any
