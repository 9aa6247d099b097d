# File: /app/models/trash.py | Version: 1.0 | Title: Trash ledger for soft-deleted entities
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.models.core_entities import gen_uuid, utcnow


class TrashItem(Base):
    __tablename__ = "trash_items"
    __table_args__ = (
        UniqueConstraint("item_type", "item_id", name="uq_trash_items_type_item"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)  # database | row | file
    item_id: Mapped[str] = mapped_column(String, nullable=False)
    # Table holding the soft-deleted entity (registry table or a physical database table)
    physical_location: Mapped[str] = mapped_column(String(100), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_info: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    owner_user_id: Mapped[str] = mapped_column(String, nullable=False)
    deleted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


Index("ix_trash_items_owner_user_id", TrashItem.owner_user_id)
Index("ix_trash_items_expires_at", TrashItem.expires_at)
