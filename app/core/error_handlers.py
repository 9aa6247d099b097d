# File: /app/core/error_handlers.py | Version: 2.0 | Title: Standardized Error Handlers (domain errors + HTTP + validation)
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import DataStoreError

log = logging.getLogger(__name__)

_CODE_MAP = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "UNPROCESSABLE_ENTITY",
    429: "TOO_MANY_REQUESTS",
    500: "INTERNAL_SERVER_ERROR",
}


def _err(code: str, message: str):
    return {"error": {"code": code, "message": message}}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DataStoreError)
    async def _domain_exc(_req: Request, exc: DataStoreError):
        return JSONResponse(
            status_code=exc.status_code, content=_err(exc.code, exc.message)
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc(_req: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_err(_CODE_MAP.get(exc.status_code, "ERROR"), str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_exc(_req: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        message = f"Validation error at {where}: {first.get('msg')}" if where else "Validation error"
        return JSONResponse(status_code=422, content=_err("UNPROCESSABLE_ENTITY", message))

    @app.exception_handler(Exception)
    async def _unhandled(_req: Request, exc: Exception):
        # Avoid leaking internals
        log.error("Unhandled error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=500, content=_err("INTERNAL_SERVER_ERROR", "Internal server error")
        )
