# File: app/db/base_class.py | Version: 2.0 | Path: /app/db/base_class.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Single, authoritative Base for the registry tables.

    Per-database physical tables are not mapped here; the backing store builds
    them on its own MetaData for each call.
    """
