# File: /app/main.py | Version: 2.0 | Title: FastAPI App (router includes + standardized errors)
from __future__ import annotations

import logging

from fastapi import FastAPI

from app.core.error_handlers import register_exception_handlers
from app.core.logging import configure_logging
from app.middleware.rate_limit import MemoryRateLimiter
from app.observability.sentry import init_sentry_if_configured
from app.routers import auth, databases, documents, health, rows, snapshots, tools, trash

# Initialize logging & observability
configure_logging()
# Silence very verbose multipart parser logs to avoid pytest "closed file" noise
logging.getLogger("python_multipart.multipart").setLevel(logging.WARNING)
init_sentry_if_configured()

# App
app = FastAPI(title="Data Store API")
app.add_middleware(MemoryRateLimiter)  # no-op unless RATE_LIMIT_ENABLED=true
register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(health.router)
app.include_router(documents.router)
app.include_router(databases.router)
app.include_router(rows.router)
app.include_router(trash.router)
app.include_router(snapshots.router)
app.include_router(tools.router)
