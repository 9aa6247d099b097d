# File: app/routers/health.py | Version: 1.1 | Title: Health & readiness endpoints
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import get_db

log = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/healthz")
def healthz() -> dict:
    """
    Liveness check: returns 200 if the app can serve requests.
    """
    return {"status": "ok"}


@router.get("/readyz")
def readyz(db: Session = Depends(get_db)):
    """
    Readiness check: 200 if the registry database answers SELECT 1, else 503.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log.warning("Readiness check failed: %s", exc)
        return JSONResponse({"status": "degraded", "db": "error"}, status_code=503)
    return {"status": "ok", "db": "ok"}
