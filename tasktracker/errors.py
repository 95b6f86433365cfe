"""Structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        self.payload = build_error_payload(code, message, details)


class Unauthorized(AppError):
    """Actor lacks rights for the operation."""

    def __init__(self, message: str = "You are not allowed to perform this action"):
        super().__init__(403, "forbidden", message)


class NotFound(AppError):
    """Referenced task, assignment or user does not exist."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(404, "not_found", message)


class ValidationError(AppError):
    """Malformed input; `field` names the offending field when known."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(400, "validation_error", message, details)
        self.field = field


class Conflict(AppError):
    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(400, "conflict", message, details)
        self.field = field


class InvalidToken(AppError):
    """Bearer token is malformed, forged, expired or issued for someone else."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(401, "invalid_token", message)


class AuthenticationFailed(AppError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(401, "invalid_credentials", message)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.payload, headers=headers)
