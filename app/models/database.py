# File: /app/models/database.py | Version: 1.0 | Title: Registry record per user-defined database
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.models.core_entities import utcnow


class DatabaseRecord(Base):
    """
    One row per user-defined database. Columns, views, default view and pinned
    columns live in ``config``; cell data lives in the physical table named by
    ``table_name``.
    """

    __tablename__ = "document_databases"

    database_id: Mapped[str] = mapped_column(String, primary_key=True)
    document_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("document.id"), index=True, nullable=True
    )
    table_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


Index("ix_document_databases_deleted_at", DatabaseRecord.deleted_at)
