# File: /app/schemas/__init__.py | Version: 3.0 | Path: /app/schemas/__init__.py
from . import auth, databases, documents, rows, snapshots, tools, trash

__all__ = ["auth", "databases", "documents", "rows", "snapshots", "tools", "trash"]
