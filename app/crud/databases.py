# File: /app/crud/databases.py | Version: 1.0 | Title: Schema manager (databases, columns, views) + ColumnMapper
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    AccessDenied,
    BackingStoreError,
    ConfirmationRequired,
    NotFound,
    ValidationError,
)
from app.crud import snapshots
from app.crud.templates import DEFAULT_CHOICE_COLOR, TEMPLATES, make_column
from app.models.core_entities import Document, as_utc, utcnow
from app.models.database import DatabaseRecord
from app.schemas.databases import COLUMN_TYPES, SELECT_TYPES, normalize_column_type
from app.storage.base import BackingStore, PhysicalRow, iso
from app.storage.naming import new_database_id, physical_table_name

log = logging.getLogger(__name__)

REGISTRY_TABLE = DatabaseRecord.__tablename__


def _as_dict(item: Any) -> Dict[str, Any]:
    if hasattr(item, "model_dump"):
        return item.model_dump(exclude_none=True)
    return dict(item)


# ---- Choices ----


def slugify_choice(label: str) -> str:
    """'In Progress' -> 'in_progress'"""
    return re.sub(r"\s+", "_", label.strip().lower())


def normalize_choices(items: Sequence[Any]) -> Dict[str, Any]:
    choices: List[Dict[str, Any]] = []
    seen = set()
    for raw in items:
        item = _as_dict(raw)
        label = str(item.get("label") or "").strip()
        if not label:
            raise ValidationError("Every choice needs a non-empty label")
        choice_id = str(item.get("id") or "").strip() or slugify_choice(label)
        if choice_id in seen:
            raise ValidationError(f"Duplicate choice id '{choice_id}'")
        seen.add(choice_id)
        choices.append(
            {"id": choice_id, "label": label, "color": item.get("color") or DEFAULT_CHOICE_COLOR}
        )
    return {"choices": choices}


def _column_options(col_type: str, options: Any) -> Optional[Dict[str, Any]]:
    if col_type in SELECT_TYPES:
        if options is None:
            return {"choices": []}
        if isinstance(options, dict):
            return normalize_choices(options.get("choices") or [])
        return normalize_choices(options)

    if options is None:
        return None
    if isinstance(options, dict):
        # format hints (date_format, format, ...) are stored as given
        return copy.deepcopy(options)
    raise ValidationError(
        f"Choice options are only valid for select and multi-select columns, not '{col_type}'"
    )


def _checked_type(col_type: Any) -> str:
    normalized = normalize_column_type(col_type)
    if normalized not in COLUMN_TYPES:
        raise ValidationError(f"Unknown column type: {col_type!r}")
    return normalized


# ---- Mapper ----


class ColumnMapper:
    """
    Converts between name-keyed cells (what callers send and receive) and
    id-keyed cells (what the backing store holds). Build one from the record
    at every read/write boundary; never keep one across calls.
    """

    def __init__(self, columns: Sequence[Dict[str, Any]]):
        self.columns = sorted(columns, key=lambda c: c.get("order", 0))
        self._by_id = {c["id"]: c for c in self.columns}
        self._by_name = {c["name"]: c for c in self.columns}

    @property
    def column_ids(self) -> List[str]:
        return [c["id"] for c in self.columns]

    def column(self, column_id: str) -> Optional[Dict[str, Any]]:
        return self._by_id.get(column_id)

    def column_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return self._by_name.get(name)

    def to_ids(self, cells_by_name: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        """Returns (cells keyed by column id, names that matched no column)."""
        by_id: Dict[str, Any] = {}
        dropped: List[str] = []
        for name, value in cells_by_name.items():
            col = self._by_name.get(name)
            if col is None:
                dropped.append(name)
                continue
            by_id[col["id"]] = value
        return by_id, dropped

    def to_names(self, cells_by_id: Dict[str, Any]) -> Dict[str, Any]:
        return {
            self._by_id[cid]["name"]: value
            for cid, value in cells_by_id.items()
            if cid in self._by_id
        }

    def validate_cells(self, cells_by_id: Dict[str, Any], where: Optional[str] = None) -> None:
        prefix = f"{where}: " if where else ""
        for cid, value in cells_by_id.items():
            col = self._by_id[cid]
            if col["type"] not in SELECT_TYPES or value is None:
                continue
            allowed = [c["id"] for c in (col.get("options") or {}).get("choices", [])]
            values = value if col["type"] == "multi-select" and isinstance(value, list) else [value]
            for v in values:
                if not isinstance(v, str) or v not in allowed:
                    raise ValidationError(
                        f"{prefix}Invalid value {v!r} for column '{col['name']}'. "
                        f"Use a choice id: {', '.join(allowed) or '(no choices defined)'}"
                    )

    def denormalize(self, row: PhysicalRow) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "_id": row["id"],
            "_order": row["row_order"],
            "_created_at": iso(row["created_at"]),
            "_updated_at": iso(row["updated_at"]),
        }
        cells = row.get("cells") or {}
        for col in self.columns:
            out[col["name"]] = cells.get(col["id"])
        return out


def column_mapper(record: DatabaseRecord) -> ColumnMapper:
    return ColumnMapper((record.config or {}).get("columns", []))


# ---- Projections ----


def record_state(record: DatabaseRecord) -> Dict[str, Any]:
    """Full JSON-safe state of a registry record (used as snapshot payload)."""
    return {
        "database_id": record.database_id,
        "document_id": record.document_id,
        "table_name": record.table_name,
        "name": record.name,
        "config": copy.deepcopy(record.config),
        "created_at": iso(record.created_at),
        "updated_at": iso(record.updated_at),
        "deleted_at": iso(record.deleted_at),
    }


def schema_payload(record: DatabaseRecord) -> Dict[str, Any]:
    config = record.config or {}
    return {
        "database_id": record.database_id,
        "name": record.name,
        "kind": config.get("kind", "generic"),
        "document_id": record.document_id,
        "table_name": record.table_name,
        "columns": column_mapper(record).columns,
        "views": config.get("views", []),
        "default_view": config.get("default_view", "table"),
        "pinned_columns": config.get("pinned_columns", []),
        "created_at": as_utc(record.created_at),
        "updated_at": as_utc(record.updated_at),
    }


def summary_payload(record: DatabaseRecord) -> Dict[str, Any]:
    config = record.config or {}
    return {
        "database_id": record.database_id,
        "name": record.name,
        "kind": config.get("kind", "generic"),
        "document_id": record.document_id,
        "column_count": len(config.get("columns", [])),
        "created_at": as_utc(record.created_at),
        "updated_at": as_utc(record.updated_at),
    }


# ---- Databases ----


def get_record(db: Session, database_id: str, include_deleted: bool = False) -> DatabaseRecord:
    record = db.get(DatabaseRecord, database_id)
    if record is None or (record.deleted_at is not None and not include_deleted):
        raise NotFound(f"Database not found: {database_id}")
    return record


def list_databases(
    db: Session,
    *,
    user_id: str,
    document_id: Optional[str] = None,
    kind: Optional[str] = None,
) -> List[Dict[str, Any]]:
    q = (
        db.query(DatabaseRecord)
        .outerjoin(Document, Document.id == DatabaseRecord.document_id)
        .filter(DatabaseRecord.deleted_at.is_(None))
        .filter(or_(DatabaseRecord.document_id.is_(None), Document.owner_id == user_id))
    )
    if document_id:
        q = q.filter(DatabaseRecord.document_id == document_id)
    records = q.order_by(DatabaseRecord.created_at.desc()).all()
    if kind:
        records = [r for r in records if (r.config or {}).get("kind") == kind]
    return [summary_payload(r) for r in records]


def _build_columns(columns: Sequence[Any], start_order: int) -> List[Dict[str, Any]]:
    built = []
    for offset, raw in enumerate(columns):
        item = _as_dict(raw)
        col_type = _checked_type(item.get("type"))
        name = str(item.get("name") or "").strip()
        if not name:
            raise ValidationError("Column name must not be empty")
        built.append(
            make_column(
                name,
                col_type,
                start_order + offset,
                options=_column_options(col_type, item.get("options")),
            )
        )
    return built


def create_database(
    db: Session,
    store: BackingStore,
    *,
    user_id: str,
    name: str,
    kind: str = "generic",
    document_id: Optional[str] = None,
    columns: Optional[Sequence[Any]] = None,
) -> DatabaseRecord:
    if kind not in TEMPLATES:
        raise ValidationError(f"Unknown database kind: {kind!r}")
    name = name.strip()
    if not name:
        raise ValidationError("Database name must not be empty")

    if document_id is not None:
        doc = db.get(Document, document_id)
        if doc is None:
            raise NotFound(f"Document not found: {document_id}")
        if doc.owner_id != user_id:
            raise AccessDenied("Access denied: you do not own this document")

    config = TEMPLATES[kind]()
    config["columns"].extend(_build_columns(columns or [], len(config["columns"])))
    names = [c["name"] for c in config["columns"]]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate column names: {', '.join(duplicates)}")

    database_id = new_database_id()
    record = DatabaseRecord(
        database_id=database_id,
        document_id=document_id,
        table_name=physical_table_name(database_id),
        name=name,
        config={"kind": kind, **config},
    )
    db.add(record)
    db.commit()

    try:
        store.provision_table(database_id, [c["id"] for c in config["columns"]])
        db.commit()
    except (BackingStoreError, SQLAlchemyError) as exc:
        db.rollback()
        log.warning("Provisioning %s failed; removing its metadata", database_id)
        db.delete(record)
        db.commit()
        if isinstance(exc, BackingStoreError):
            raise
        raise BackingStoreError(f"Could not provision storage for database {database_id}") from exc

    db.refresh(record)
    log.info(
        "Created %s database %s (%s) with %d columns",
        kind,
        database_id,
        name,
        len(config["columns"]),
    )
    return record


def delete_database(db: Session, record: DatabaseRecord, *, user_id: str, confirm: bool) -> Dict[str, Any]:
    from app.crud import trash

    if not confirm:
        raise ConfirmationRequired(
            f"Deleting database '{record.name}' requires confirm=true"
        )
    return trash.soft_delete_database(db, record, user_id=user_id)


# ---- Columns ----


def _save_config(
    db: Session,
    record: DatabaseRecord,
    config: Dict[str, Any],
    *,
    user_id: str,
    source_operation: str,
) -> None:
    snapshots.save(
        db,
        prior_state=record_state(record),
        entity_type="database_config",
        entity_id=record.database_id,
        physical_location=REGISTRY_TABLE,
        source_operation=source_operation,
        operation_kind="update",
        owner_user_id=user_id,
    )
    record.config = config
    record.updated_at = utcnow()
    db.commit()
    db.refresh(record)


def _find_column(config: Dict[str, Any], column_id: str) -> Dict[str, Any]:
    for col in config.get("columns", []):
        if col["id"] == column_id:
            return col
    raise NotFound(f"Column not found: {column_id}")


def add_column(
    db: Session,
    store: BackingStore,
    record: DatabaseRecord,
    *,
    user_id: str,
    name: str,
    col_type: str,
    options: Any = None,
) -> Dict[str, Any]:
    col_type = _checked_type(col_type)
    name = name.strip()
    if not name:
        raise ValidationError("Column name must not be empty")
    config = copy.deepcopy(record.config or {})
    columns = config.setdefault("columns", [])
    if any(c["name"] == name for c in columns):
        raise ValidationError(f"A column named '{name}' already exists")

    next_order = max((c.get("order", 0) for c in columns), default=-1) + 1
    column = make_column(name, col_type, next_order, options=_column_options(col_type, options))
    columns.append(column)

    # physical slot first; metadata only references slots that exist
    store.provision_table(record.database_id, [c["id"] for c in columns])
    _save_config(db, record, config, user_id=user_id, source_operation="add_column")
    log.info("Added %s column '%s' to %s", col_type, name, record.database_id)
    return column


def update_column(
    db: Session,
    record: DatabaseRecord,
    column_id: str,
    *,
    user_id: str,
    name: Optional[str] = None,
    visible: Optional[bool] = None,
    options: Any = None,
    width: Optional[int] = None,
    color: Optional[str] = None,
) -> Dict[str, Any]:
    config = copy.deepcopy(record.config or {})
    column = _find_column(config, column_id)

    if all(v is None for v in (name, visible, options, width, color)):
        raise ValidationError("Nothing to update: supply name, visible, options, width or color")

    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError("Column name must not be empty")
        if any(c["name"] == name and c["id"] != column_id for c in config["columns"]):
            raise ValidationError(f"A column named '{name}' already exists")
        column["name"] = name
    if visible is not None:
        column["visible"] = visible
    if options is not None:
        # select choices are replaced wholesale, never merged
        column["options"] = _column_options(column["type"], options)
    if width is not None:
        column["width"] = width
    if color is not None:
        column["color"] = color

    _save_config(db, record, config, user_id=user_id, source_operation="update_column")
    log.info("Updated column %s of %s", column_id, record.database_id)
    return column


def delete_column(db: Session, record: DatabaseRecord, column_id: str, *, user_id: str) -> Dict[str, Any]:
    config = copy.deepcopy(record.config or {})
    column = _find_column(config, column_id)
    config["columns"] = [c for c in config["columns"] if c["id"] != column_id]
    config["pinned_columns"] = [c for c in config.get("pinned_columns", []) if c != column_id]
    for view in config.get("views", []):
        view_config = view.get("config") or {}
        for key in ("group_by", "date_column_id"):
            if view_config.get(key) == column_id:
                view_config.pop(key)

    _save_config(db, record, config, user_id=user_id, source_operation="delete_column")
    log.info("Deleted column '%s' (%s) from %s", column["name"], column_id, record.database_id)
    return column
