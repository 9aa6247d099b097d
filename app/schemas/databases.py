# File: /app/schemas/databases.py | Version: 1.0 | Title: Pydantic v2 schemas for databases, columns and views
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

COLUMN_TYPES = (
    "text",
    "number",
    "select",
    "multi-select",
    "date",
    "checkbox",
    "url",
    "email",
    "phone",
    "person",
    "formula",
    "relation",
    "rollup",
    "created_time",
    "last_edited_time",
    "created_by",
    "last_edited_by",
)
SELECT_TYPES = ("select", "multi-select")

ColumnType = Literal[
    "text",
    "number",
    "select",
    "multi-select",
    "date",
    "checkbox",
    "url",
    "email",
    "phone",
    "person",
    "formula",
    "relation",
    "rollup",
    "created_time",
    "last_edited_time",
    "created_by",
    "last_edited_by",
]
DatabaseKind = Literal["task", "event", "generic"]
ViewType = Literal["table", "kanban", "calendar"]


def normalize_column_type(value: Any) -> Any:
    # multi_select is accepted on input, stored with a hyphen
    if isinstance(value, str) and value.strip().lower() == "multi_select":
        return "multi-select"
    return value


# ---- Columns ----


class ChoiceIn(BaseModel):
    label: str = Field(min_length=1, max_length=100)
    color: Optional[str] = None
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)


class Choice(BaseModel):
    id: str
    label: str
    color: Optional[str] = None


# A list of {label, color?} for select/multi-select, or a dict of format hints
ColumnOptionsIn = Union[List[ChoiceIn], Dict[str, Any]]


class ColumnCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: ColumnType
    options: Optional[ColumnOptionsIn] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        return normalize_column_type(value)


class ColumnUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    visible: Optional[bool] = None
    options: Optional[ColumnOptionsIn] = None
    width: Optional[int] = Field(default=None, ge=40, le=2000)
    color: Optional[str] = None


class ColumnOut(BaseModel):
    id: str
    name: str
    type: str
    visible: bool = True
    order: int
    required: bool = False
    readonly: bool = False
    width: Optional[int] = None
    color: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class ColumnDeleteOut(BaseModel):
    detail: str
    column: ColumnOut


# ---- Views ----


class ViewOut(BaseModel):
    id: str
    name: str
    type: ViewType
    config: Dict[str, Any] = {}


# ---- Databases ----


class DatabaseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    kind: DatabaseKind = "generic"
    document_id: Optional[str] = None
    columns: Optional[List[ColumnCreate]] = None


class DatabaseSummaryOut(BaseModel):
    database_id: str
    name: str
    kind: DatabaseKind
    document_id: Optional[str] = None
    column_count: int
    created_at: datetime
    updated_at: datetime


class DatabaseSchemaOut(BaseModel):
    database_id: str
    name: str
    kind: DatabaseKind
    document_id: Optional[str] = None
    table_name: str
    columns: List[ColumnOut]
    views: List[ViewOut]
    default_view: str
    pinned_columns: List[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DatabaseDeleteOut(BaseModel):
    detail: str
    database_id: str
    trash_id: str
    snapshot_token: str
