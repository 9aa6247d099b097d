# File: /app/routers/tools.py | Version: 1.0 | Title: Named operation catalogue (one dispatch endpoint)
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Type

from fastapi import APIRouter, Body, Depends
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError
from app.core.permissions import require_database_access
from app.crud import csv_import as crud_csv
from app.crud import databases as crud_db
from app.crud import rows as crud_rows
from app.crud import snapshots as crud_snap
from app.crud import trash as crud_trash
from app.db.session import get_db
from app.models.core_entities import User
from app.schemas import tools as schema_tools
from app.security import get_current_user
from app.storage import BackingStore, get_backing_store

log = logging.getLogger(__name__)

router = APIRouter(prefix="/tools", tags=["Tools"])


class Call(NamedTuple):
    db: Session
    store: BackingStore
    user: User

    def gate(self, database_id: str):
        return require_database_access(self.db, user_id=self.user.id, database_id=database_id)


class Tool(NamedTuple):
    description: str
    args: Type[BaseModel]
    run: Callable[[Any, Call], Any]


# ---- Handlers ----


def _list_databases(a: schema_tools.ListDatabasesArgs, c: Call):
    return crud_db.list_databases(c.db, user_id=c.user.id, document_id=a.document_id, kind=a.kind)


def _create_database(a: schema_tools.CreateDatabaseArgs, c: Call):
    record = crud_db.create_database(
        c.db,
        c.store,
        user_id=c.user.id,
        name=a.name,
        kind=a.kind,
        document_id=a.document_id,
        columns=a.columns,
    )
    return crud_db.schema_payload(record)


def _delete_database(a: schema_tools.DeleteDatabaseArgs, c: Call):
    return crud_db.delete_database(c.db, c.gate(a.database_id), user_id=c.user.id, confirm=a.confirm)


def _get_database_schema(a: schema_tools.GetDatabaseSchemaArgs, c: Call):
    return crud_db.schema_payload(c.gate(a.database_id))


def _add_column(a: schema_tools.AddColumnArgs, c: Call):
    return crud_db.add_column(
        c.db,
        c.store,
        c.gate(a.database_id),
        user_id=c.user.id,
        name=a.name,
        col_type=a.type,
        options=a.options,
    )


def _update_column(a: schema_tools.UpdateColumnArgs, c: Call):
    changes = a.model_dump(exclude_unset=True, exclude={"database_id", "column_id"})
    return crud_db.update_column(
        c.db, c.gate(a.database_id), a.column_id, user_id=c.user.id, **changes
    )


def _delete_column(a: schema_tools.DeleteColumnArgs, c: Call):
    column = crud_db.delete_column(c.db, c.gate(a.database_id), a.column_id, user_id=c.user.id)
    return {"detail": f"Column '{column['name']}' deleted", "column": column}


def _get_database_rows(a: schema_tools.GetDatabaseRowsArgs, c: Call):
    return crud_rows.get_rows(
        c.store,
        c.gate(a.database_id),
        limit=a.limit,
        offset=a.offset,
        sort_by=a.sort_by,
        sort_order=a.sort_order,
    )


def _add_database_row(a: schema_tools.AddDatabaseRowArgs, c: Call):
    return crud_rows.add_row(c.db, c.store, c.gate(a.database_id), cells=a.cells)


def _update_database_row(a: schema_tools.UpdateDatabaseRowArgs, c: Call):
    return crud_rows.update_row(
        c.db,
        c.store,
        c.gate(a.database_id),
        user_id=c.user.id,
        row_id=a.row_id,
        cells=a.cells,
        expected_updated_at=a.expected_updated_at,
    )


def _delete_database_rows(a: schema_tools.DeleteDatabaseRowsArgs, c: Call):
    return crud_rows.delete_rows(
        c.db, c.store, c.gate(a.database_id), user_id=c.user.id, row_ids=a.row_ids
    )


def _import_csv(a: schema_tools.ImportCsvArgs, c: Call):
    return crud_csv.import_csv(
        c.db,
        c.store,
        c.gate(a.database_id),
        csv_text=a.csv_text,
        skip_unknown_columns=a.skip_unknown_columns,
    )


def _list_trash(a: schema_tools.ListTrashArgs, c: Call):
    return crud_trash.list_trash(c.db, user_id=c.user.id, item_type=a.item_type, limit=a.limit)


def _restore_from_trash(a: schema_tools.RestoreFromTrashArgs, c: Call):
    return crud_trash.restore(c.db, c.store, trash_id=a.trash_id, user_id=c.user.id)


def _permanent_delete_from_trash(a: schema_tools.PermanentDeleteFromTrashArgs, c: Call):
    return crud_trash.permanent_delete(
        c.db, c.store, trash_id=a.trash_id, user_id=c.user.id, confirm=a.confirm
    )


def _empty_trash(a: schema_tools.EmptyTrashArgs, c: Call):
    return crud_trash.empty_trash(c.db, c.store, user_id=c.user.id, confirm=a.confirm)


def _list_snapshots(a: schema_tools.ListSnapshotsArgs, c: Call):
    return crud_snap.list_snapshots(
        c.db, user_id=c.user.id, entity_type=a.entity_type, entity_id=a.entity_id, limit=a.limit
    )


def _restore_snapshot(a: schema_tools.RestoreSnapshotArgs, c: Call):
    return crud_snap.restore(c.db, token=a.token, user_id=c.user.id)


TOOLS: Dict[str, Tool] = {
    "list_databases": Tool(
        "List the databases you can access, newest first. Filter by document_id or kind.",
        schema_tools.ListDatabasesArgs,
        _list_databases,
    ),
    "create_database": Tool(
        "Create a database. kind=task and kind=event come with predefined columns and views; "
        "generic uses the supplied columns.",
        schema_tools.CreateDatabaseArgs,
        _create_database,
    ),
    "delete_database": Tool(
        "Move a database to the trash. Requires confirm=true.",
        schema_tools.DeleteDatabaseArgs,
        _delete_database,
    ),
    "get_database_schema": Tool(
        "Columns (with choice ids), views, default view and pinned columns of a database.",
        schema_tools.GetDatabaseSchemaArgs,
        _get_database_schema,
    ),
    "add_column": Tool(
        "Add a column. For select and multi_select give options as [{label, color?}].",
        schema_tools.AddColumnArgs,
        _add_column,
    ),
    "update_column": Tool(
        "Rename, hide, resize or recolor a column, or replace its choices. The type cannot change.",
        schema_tools.UpdateColumnArgs,
        _update_column,
    ),
    "delete_column": Tool(
        "Remove a column definition. Its cell values become unreachable.",
        schema_tools.DeleteColumnArgs,
        _delete_column,
    ),
    "get_database_rows": Tool(
        "Page through rows (limit up to 100). Cells are keyed by column name.",
        schema_tools.GetDatabaseRowsArgs,
        _get_database_rows,
    ),
    "add_database_row": Tool(
        "Add a row from cells keyed by column name. Select cells take choice ids.",
        schema_tools.AddDatabaseRowArgs,
        _add_database_row,
    ),
    "update_database_row": Tool(
        "Change some cells of a row. Returns a snapshot token of the previous state.",
        schema_tools.UpdateDatabaseRowArgs,
        _update_database_row,
    ),
    "delete_database_rows": Tool(
        "Move rows to the trash.",
        schema_tools.DeleteDatabaseRowsArgs,
        _delete_database_rows,
    ),
    "import_csv": Tool(
        "Append rows from CSV text whose header names match column names.",
        schema_tools.ImportCsvArgs,
        _import_csv,
    ),
    "list_trash": Tool(
        "Items in your trash with their remaining retention days.",
        schema_tools.ListTrashArgs,
        _list_trash,
    ),
    "restore_from_trash": Tool(
        "Bring a trashed database or row back.",
        schema_tools.RestoreFromTrashArgs,
        _restore_from_trash,
    ),
    "permanent_delete_from_trash": Tool(
        "Delete a trashed item for good. Requires confirm=true.",
        schema_tools.PermanentDeleteFromTrashArgs,
        _permanent_delete_from_trash,
    ),
    "empty_trash": Tool(
        "Delete every item in your trash for good. Requires confirm=true.",
        schema_tools.EmptyTrashArgs,
        _empty_trash,
    ),
    "list_snapshots": Tool(
        "Snapshots captured before your updates and deletions, newest first.",
        schema_tools.ListSnapshotsArgs,
        _list_snapshots,
    ),
    "restore_snapshot": Tool(
        "Return the state captured by a snapshot token. Nothing is written back.",
        schema_tools.RestoreSnapshotArgs,
        _restore_snapshot,
    ),
}


def _validation_message(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(p) for p in first.get("loc", ()))
    return f"Invalid argument {where}: {first.get('msg')}" if where else str(first.get("msg"))


@router.get("", response_model=List[schema_tools.ToolInfo])
def list_tools():
    return [
        {"name": name, "description": tool.description, "parameters": tool.args.model_json_schema()}
        for name, tool in TOOLS.items()
    ]


@router.post("/{name}", response_model=schema_tools.ToolResult)
def call_tool(
    name: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    db: Session = Depends(get_db),
    store: BackingStore = Depends(get_backing_store),
    current_user: User = Depends(get_current_user),
):
    tool = TOOLS.get(name)
    if tool is None:
        raise NotFound(f"Unknown tool: {name}")
    try:
        args = tool.args.model_validate(payload or {})
    except PydanticValidationError as exc:
        raise ValidationError(_validation_message(exc)) from exc

    log.debug("Tool %s called by %s", name, current_user.id)
    result = tool.run(args, Call(db, store, current_user))
    return {"tool": name, "result": jsonable_encoder(result)}
