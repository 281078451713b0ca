"""
Error hierarchy shared by the registries, the access-control facade and
the HTTP layer.

Each error knows its wire code and HTTP status; ``main`` renders every
``AppError`` as ``{"error": {"code", "message", "details"}}``.
"""
from typing import Any

from fastapi import status


class AppError(Exception):
    code: str = "APP_ERROR"
    message: str = "Application error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    details: Any | None = None

    def __init__(self, message: str | None = None, *, details: Any | None = None):
        if message is not None:
            self.message = message
        if details is not None:
            self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_payload(self) -> dict[str, Any]:
        return error_payload(self.code, self.message, self.details)


class ValidationError(AppError):
    """Malformed input or a reference rejected by the strict policy."""

    code = "VALIDATION_ERROR"
    message = "Validation error"


class NotFoundError(AppError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    """An access-control invariant refused the operation."""

    code = "FORBIDDEN"
    message = "Operation not allowed"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(AppError):
    code = "CONFLICT_ERROR"
    message = "Resource conflict"
    status_code = status.HTTP_409_CONFLICT


class DuplicateKeyError(ConflictError):
    """A permission key is already taken."""

    code = "DUPLICATE_KEY"
    message = "Key already exists"


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    message = "Internal server error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# DuplicateKeyError shares 409 with ConflictError; the generic code wins.
ERROR_CODE_BY_STATUS: dict[int, str] = {
    error.status_code: error.code
    for error in (ValidationError, ForbiddenError, NotFoundError, ConflictError)
}
ERROR_CODE_BY_STATUS[status.HTTP_422_UNPROCESSABLE_ENTITY] = ValidationError.code


def error_payload(code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details}}


def resolve_error_code(status_code: int) -> str:
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return InternalError.code
    return ERROR_CODE_BY_STATUS.get(status_code, "UNKNOWN_ERROR")
