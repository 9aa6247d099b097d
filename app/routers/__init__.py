# File: /app/routers/__init__.py | Version: 2.0 | Path: /app/routers/__init__.py
"""
Router package exports.

Keeping these explicit helps static analyzers and avoids surprises
when importing submodules like: `from app.routers import rows as rows_router`.
"""
from . import auth, databases, documents, health, rows, snapshots, tools, trash

__all__ = ["auth", "databases", "documents", "health", "rows", "snapshots", "tools", "trash"]
