# File: /app/core/errors.py | Version: 1.0 | Title: Domain error taxonomy (rendered by error_handlers)
from __future__ import annotations


class DataStoreError(Exception):
    """Base class for every failure surfaced to API callers."""

    status_code: int = 500
    code: str = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DataStoreError):
    status_code = 404
    code = "NOT_FOUND"


class AccessDenied(DataStoreError):
    status_code = 403
    code = "ACCESS_DENIED"


class ValidationError(DataStoreError):
    status_code = 400
    code = "VALIDATION_ERROR"


class ConfirmationRequired(DataStoreError):
    status_code = 400
    code = "CONFIRMATION_REQUIRED"


class Conflict(DataStoreError):
    status_code = 409
    code = "CONFLICT"


class BackingStoreError(DataStoreError):
    status_code = 502
    code = "BACKING_STORE_ERROR"
