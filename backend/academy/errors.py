"""Application error taxonomy.

Every error a service can raise maps to one HTTP status and a short ``kind``
string. ``academy.main`` renders them as ``{"error": kind, "detail": message}``.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.kind, headers=headers)


class ValidationError(AppError):
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    kind = "auth_error"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class RangeNotSatisfiable(AppError):
    kind = "range_not_satisfiable"
    status_code = status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE

    def __init__(self, total: int | None = None, detail: str | None = None):
        headers = {"Content-Range": f"bytes */{total}"} if total is not None else None
        super().__init__(detail=detail, headers=headers)
        self.total = total


class InternalError(AppError):
    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class Unavailable(AppError):
    kind = "unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PayloadTooLarge(AppError):
    kind = "payload_too_large"
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
