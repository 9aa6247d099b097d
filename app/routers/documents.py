# File: /app/routers/documents.py | Version: 1.0 | Title: Owning documents (ownership only)
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.core_entities import Document, User
from app.schemas import documents as schema_doc
from app.security import get_current_user

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post("", response_model=schema_doc.DocumentOut, status_code=status.HTTP_201_CREATED)
def create_document(
    data: schema_doc.DocumentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    doc = Document(owner_id=current_user.id, title=data.title)
    db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc


@router.get("", response_model=List[schema_doc.DocumentOut])
def list_documents(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Document)
        .filter(Document.owner_id == current_user.id)
        .order_by(Document.created_at.desc())
        .all()
    )
