# File: /app/schemas/documents.py | Version: 1.0 | Title: Owning document schemas
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentCreate(BaseModel):
    title: str = Field(default="Untitled", min_length=1, max_length=255)


class DocumentOut(BaseModel):
    id: str
    owner_id: str
    title: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
