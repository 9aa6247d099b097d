# File: /app/storage/sql_store.py | Version: 1.1 | Title: SQLAlchemy backing store (one physical table per database)
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    asc,
    delete,
    desc,
    func,
    inspect,
    insert,
    select,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import BackingStoreError
from app.models.core_entities import gen_uuid, utcnow
from app.storage.base import SORTABLE_FIELDS, BackingStore, PhysicalRow
from app.storage.naming import physical_column_name, physical_table_name

log = logging.getLogger(__name__)

BOOKKEEPING = ("id", "row_order", "created_at", "updated_at", "deleted_at")


def _bookkeeping_columns() -> List[Column]:
    return [
        Column("id", String(36), primary_key=True),
        Column("row_order", Integer, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
        Column("deleted_at", DateTime(timezone=True), nullable=True),
    ]


def _cell_column(column_id: str) -> Column:
    return Column(physical_column_name(column_id), JSON, nullable=True)


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("Backing store failure during %s", action, exc_info=exc)
        raise BackingStoreError(
            f"Backing store failure during {action}: {exc.__class__.__name__}"
        ) from exc


class SqlBackingStore(BackingStore):
    """
    Physical tables live in the same relational database as the registry and
    share the request's Session, so a single ``db.commit()`` makes metadata
    and cell writes visible together.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---- helpers ----

    def _table(self, database_id: str, column_ids: Sequence[str] = ()) -> Table:
        # Built from the caller's current column list on every call
        return Table(
            physical_table_name(database_id),
            MetaData(),
            *_bookkeeping_columns(),
            *(_cell_column(cid) for cid in column_ids),
        )

    def _operations(self) -> Operations:
        return Operations(MigrationContext.configure(self.db.connection()))

    @staticmethod
    def _to_row(mapping: Any, column_ids: Sequence[str]) -> PhysicalRow:
        row: PhysicalRow = {key: mapping[key] for key in BOOKKEEPING}
        row["cells"] = {cid: mapping[physical_column_name(cid)] for cid in column_ids}
        return row

    # ---- table lifecycle ----

    def provision_table(self, database_id: str, column_ids: Iterable[str]) -> None:
        name = physical_table_name(database_id)
        column_ids = list(column_ids)
        with _store_errors(f"provision of {name}"):
            insp = inspect(self.db.connection())
            ops = self._operations()
            if not insp.has_table(name):
                ops.create_table(
                    name,
                    *_bookkeeping_columns(),
                    *(_cell_column(cid) for cid in column_ids),
                )
                ops.create_index(f"ix_{name}_row_order", name, ["row_order"])
                log.info("Provisioned table %s (%d column slots)", name, len(column_ids))
                return

            existing = {c["name"] for c in insp.get_columns(name)}
            for cid in column_ids:
                if physical_column_name(cid) not in existing:
                    ops.add_column(name, _cell_column(cid))
                    log.info("Added column slot %s to %s", physical_column_name(cid), name)

    def drop_table(self, database_id: str) -> None:
        name = physical_table_name(database_id)
        with _store_errors(f"drop of {name}"):
            if inspect(self.db.connection()).has_table(name):
                self._operations().drop_table(name)
                log.info("Dropped table %s", name)

    # ---- rows ----

    def insert_rows(
        self, database_id: str, column_ids: Sequence[str], rows: List[Dict[str, Any]]
    ) -> List[PhysicalRow]:
        if not rows:
            return []
        table = self._table(database_id, column_ids)
        now = utcnow()
        payload = []
        for r in rows:
            cells = r.get("cells") or {}
            rec: Dict[str, Any] = {
                "id": r.get("id") or gen_uuid(),
                "row_order": r["row_order"],
                "created_at": now,
                "updated_at": now,
                "deleted_at": None,
            }
            # executemany needs the same keys in every dict
            for cid in column_ids:
                rec[physical_column_name(cid)] = cells.get(cid)
            payload.append(rec)

        with _store_errors(f"insert into {table.name}"):
            self.db.execute(insert(table), payload)
            ids = [rec["id"] for rec in payload]
            result = self.db.execute(
                select(table).where(table.c.id.in_(ids)).order_by(asc(table.c.row_order))
            )
            return [self._to_row(m, column_ids) for m in result.mappings()]

    def get_row(
        self,
        database_id: str,
        column_ids: Sequence[str],
        row_id: str,
        include_deleted: bool = False,
    ) -> Optional[PhysicalRow]:
        table = self._table(database_id, column_ids)
        stmt = select(table).where(table.c.id == row_id)
        if not include_deleted:
            stmt = stmt.where(table.c.deleted_at.is_(None))
        with _store_errors(f"read from {table.name}"):
            mapping = self.db.execute(stmt).mappings().first()
        return self._to_row(mapping, column_ids) if mapping is not None else None

    def update_row(
        self,
        database_id: str,
        column_ids: Sequence[str],
        row_id: str,
        cells: Dict[str, Any],
        expected_updated_at: Optional[datetime] = None,
    ) -> Optional[PhysicalRow]:
        table = self._table(database_id, column_ids)
        values: Dict[str, Any] = {"updated_at": utcnow()}
        for cid, value in cells.items():
            values[physical_column_name(cid)] = value
        stmt = update(table).where(table.c.id == row_id, table.c.deleted_at.is_(None))
        if expected_updated_at is not None:
            # compare-and-set: a concurrent writer moves updated_at and the match fails
            stmt = stmt.where(table.c.updated_at == expected_updated_at)
        with _store_errors(f"update of {table.name}"):
            result = self.db.execute(stmt.values(**values))
            if result.rowcount == 0:
                return None
        return self.get_row(database_id, column_ids, row_id)

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
        if order_by not in SORTABLE_FIELDS:
            raise ValueError(f"Unsupported sort field: {order_by}")
        table = self._table(database_id, column_ids)
        direction = desc if descending else asc
        stmt = (
            select(table)
            .where(table.c.deleted_at.is_(None))
            .order_by(direction(table.c[order_by]), direction(table.c.id))
            .offset(offset)
            .limit(limit)
        )
        with _store_errors(f"query of {table.name}"):
            return [self._to_row(m, column_ids) for m in self.db.execute(stmt).mappings()]

    def count_rows(self, database_id: str) -> int:
        table = self._table(database_id)
        with _store_errors(f"count of {table.name}"):
            return int(
                self.db.execute(
                    select(func.count()).select_from(table).where(table.c.deleted_at.is_(None))
                ).scalar_one()
            )

    def max_order(self, database_id: str) -> int:
        table = self._table(database_id)
        with _store_errors(f"max order of {table.name}"):
            value = self.db.execute(select(func.max(table.c.row_order))).scalar()
        return int(value or 0)

    def set_deleted_at(
        self, database_id: str, row_ids: Sequence[str], when: Optional[datetime]
    ) -> int:
        if not row_ids:
            return 0
        table = self._table(database_id)
        with _store_errors(f"soft-delete flag on {table.name}"):
            result = self.db.execute(
                update(table).where(table.c.id.in_(list(row_ids))).values(deleted_at=when)
            )
        return result.rowcount

    def delete_rows(self, database_id: str, row_ids: Sequence[str]) -> int:
        if not row_ids:
            return 0
        table = self._table(database_id)
        with _store_errors(f"delete from {table.name}"):
            result = self.db.execute(delete(table).where(table.c.id.in_(list(row_ids))))
        return result.rowcount
