# File: /app/storage/naming.py | Version: 1.0 | Title: Deterministic physical names for databases and columns
"""
Physical storage names are pure functions of ids, never of display names,
so renaming a database or a column never touches storage.

    db-1b4e28ba-2fa1-11d2-883f-0016d3cca427  -> database_1b4e28ba_2fa1_11d2_883f_0016d3cca427
    5f0c...-...  (column id)                   -> col_5f0c..._...
"""
from __future__ import annotations

import re
from uuid import uuid4

DATABASE_ID_PREFIX = "db-"
TABLE_PREFIX = "database_"
COLUMN_PREFIX = "col_"

_SAFE_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")


def new_database_id() -> str:
    return f"{DATABASE_ID_PREFIX}{uuid4()}"


def new_column_id() -> str:
    return str(uuid4())


def _checked(name: str, source: str) -> str:
    if not _SAFE_IDENTIFIER.match(name):
        raise ValueError(f"Cannot derive a storage identifier from {source!r}")
    return name


def physical_table_name(database_id: str) -> str:
    core = database_id[len(DATABASE_ID_PREFIX):] if database_id.startswith(DATABASE_ID_PREFIX) else database_id
    return _checked(TABLE_PREFIX + core.replace("-", "_"), database_id)


def physical_column_name(column_id: str) -> str:
    return _checked(COLUMN_PREFIX + column_id.replace("-", "_"), column_id)
