"""
Error taxonomy shared by routers and services.

Each error is an HTTPException so services can raise them directly;
main.py renders every error as {"detail": ..., "request_id": ...}.
"""
from typing import Any, Optional

from fastapi import HTTPException


class AppError(HTTPException):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[Any] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail if detail is not None else self.default_detail,
            headers=headers
        )


class ValidationError(AppError):
    status_code = 400
    default_detail = "Validation failed"


class AuthError(AppError):
    status_code = 401
    default_detail = "Authentication required"


class ForbiddenError(AuthError):
    status_code = 403
    default_detail = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_detail = "Resource already exists"


class InternalError(AppError):
    status_code = 500
    default_detail = "Internal server error"
