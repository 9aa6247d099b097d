# File: /app/routers/auth.py | Version: 3.1 | Title: Auth Router (JSON+form tolerant) + Access Tokens
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.core_entities import User
from app.schemas.auth import Credentials, TokenResponse, UserResponse
from app.security import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


# ---------------------------
# Utilities
# ---------------------------


async def _read_credentials(request: Request) -> Credentials:
    """Accept JSON or form-encoded bodies and normalize keys."""
    ctype = (request.headers.get("content-type") or "").lower()
    data: Dict[str, Any] = {}
    if "application/json" in ctype:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            data = body
    else:
        form = await request.form()
        data = dict(form)

    # alias: username -> email (OAuth-style)
    if "username" in data and "email" not in data:
        data["email"] = data["username"]
    if isinstance(data.get("email"), str):
        data["email"] = data["email"].strip().lower()

    try:
        return Credentials.model_validate(data)
    except PydanticValidationError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="A valid email and a password are required",
        )


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    return user


def _issue_token_for_user(user: User) -> Dict[str, str]:
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}


# ---------------------------
# Endpoints
# ---------------------------


@router.post("/register", response_model=UserResponse)
async def register(request: Request, db: Session = Depends(get_db)):
    """
    Register a user. Idempotent: an existing email returns the existing user.
    Accepts JSON or form {email, password, [full_name]}.
    """
    creds = await _read_credentials(request)

    user = db.query(User).filter(User.email == creds.email).first()
    if not user:
        user = User(
            email=creds.email,
            full_name=creds.full_name,
            hashed_password=get_password_hash(creds.password),
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


@router.post("/login", response_model=TokenResponse)
async def login(request: Request, db: Session = Depends(get_db)):
    """Login with JSON or form {email/username, password}."""
    creds = await _read_credentials(request)
    return _issue_token_for_user(_authenticate(db, creds.email, creds.password))


@router.post("/token", response_model=TokenResponse)
def login_oauth_form(
    db: Session = Depends(get_db),
    username: str = Form(...),
    password: str = Form(...),
):
    """OAuth2 form variant (used by the OpenAPI 'Authorize' button and tests)."""
    return _issue_token_for_user(_authenticate(db, (username or "").strip().lower(), password))


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
