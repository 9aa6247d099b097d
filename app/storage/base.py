# File: /app/storage/base.py | Version: 1.1 | Title: Backing store capability interface
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.models.core_entities import as_utc

# A physical row as returned by every store:
#   {"id", "row_order", "created_at", "updated_at", "deleted_at", "cells": {column_id: value}}
PhysicalRow = Dict[str, Any]

SORTABLE_FIELDS = ("row_order", "created_at", "updated_at")


class BackingStore(ABC):
    """
    Everything the core needs from the relational store that holds cell data.

    ``provision_table`` and ``drop_table`` are the two opaque procedures the
    schema layer depends on; the rest is row-level CRUD against the physical
    table of one database. ``column_ids`` always comes from the schema as it is
    *now*; stores never remember it between calls.
    """

    @abstractmethod
    def provision_table(self, database_id: str, column_ids: Iterable[str]) -> None:
        """Create the physical table if missing and add any missing column slots."""

    @abstractmethod
    def drop_table(self, database_id: str) -> None:
        """Drop the physical table and every row in it."""

    @abstractmethod
    def insert_rows(
        self, database_id: str, column_ids: Sequence[str], rows: List[Dict[str, Any]]
    ) -> List[PhysicalRow]:
        """Insert ``[{"row_order": int, "cells": {column_id: value}}]`` in one batch."""

    @abstractmethod
    def get_row(
        self,
        database_id: str,
        column_ids: Sequence[str],
        row_id: str,
        include_deleted: bool = False,
    ) -> Optional[PhysicalRow]: ...

    @abstractmethod
    def update_row(
        self,
        database_id: str,
        column_ids: Sequence[str],
        row_id: str,
        cells: Dict[str, Any],
        expected_updated_at: Optional[datetime] = None,
    ) -> Optional[PhysicalRow]:
        """None when the row is gone or, with expected_updated_at, was changed meanwhile."""

    @abstractmethod
    def select_rows(
        self,
        database_id: str,
        column_ids: Sequence[str],
        *,
        limit: int,
        offset: int,
        order_by: str = "row_order",
        descending: bool = False,
    ) -> List[PhysicalRow]:
        """Live (not soft-deleted) rows only."""

    @abstractmethod
    def count_rows(self, database_id: str) -> int:
        """Number of live rows."""

    @abstractmethod
    def max_order(self, database_id: str) -> int:
        """Highest row_order ever assigned, soft-deleted rows included; 0 when empty."""

    @abstractmethod
    def set_deleted_at(
        self, database_id: str, row_ids: Sequence[str], when: Optional[datetime]
    ) -> int: ...

    @abstractmethod
    def delete_rows(self, database_id: str, row_ids: Sequence[str]) -> int: ...


def iso(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 in UTC with an explicit offset, whatever the driver returned."""
    value = as_utc(value)
    return value.isoformat() if value is not None else None


def jsonable_row(row: PhysicalRow) -> Dict[str, Any]:
    """A physical row with its timestamps rendered as strings, safe to store as JSON."""
    out = dict(row)
    for key in ("created_at", "updated_at", "deleted_at"):
        out[key] = iso(row.get(key))
    out["cells"] = dict(row.get("cells") or {})
    return out
