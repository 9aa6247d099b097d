# File: /app/models/snapshot.py | Version: 1.0 | Title: Append-only pre-mutation snapshots
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.models.core_entities import utcnow


class Snapshot(Base):
    __tablename__ = "snapshots"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(30), nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    physical_location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source_operation: Mapped[str] = mapped_column(String(50), nullable=False)
    operation_kind: Mapped[str] = mapped_column(String(20), nullable=False)  # update | soft_delete
    prior_state: Mapped[Any] = mapped_column(JSON, nullable=False)
    owner_user_id: Mapped[str] = mapped_column(String, nullable=False)
    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


Index("ix_snapshots_entity", Snapshot.entity_type, Snapshot.entity_id)
Index("ix_snapshots_owner_captured", Snapshot.owner_user_id, Snapshot.captured_at)
