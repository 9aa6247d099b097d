# File: app/db/__init__.py | Version: 2.0 | Path: /app/db/__init__.py
# Registry models are imported so Base.metadata knows every static table
import app.models  # noqa: F401

from .base_class import Base
from .session import SessionLocal, engine, get_db

__all__ = ["Base", "get_db", "SessionLocal", "engine"]
