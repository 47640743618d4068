# Overview: Typed application errors shared by rules, services and routes.

"""
Error taxonomy

Every error raised on purpose by the rules engine or a service is an AppError
carrying a stable machine-readable code and the HTTP status it maps to.

    VALIDATION_ERROR            400   malformed input
    AUTH_REQUIRED/INVALID/...   401   missing or bad credentials
    PERMISSION_DENIED           403   role lacks the permission
    NOT_FOUND                   404   absent or soft-deleted record
    CONFLICT                    409   uniqueness violation (barcode/code/email)
    <business code>             422   lifecycle / guard violation
    DB_ERROR, INTERNAL_ERROR    500   non-operational, message is generic

Operational errors are surfaced verbatim. Non-operational errors are logged
server-side and shown to the caller as a generic message.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base error with code, HTTP status and optional metadata."""

    code = "INTERNAL_ERROR"
    status_code = 500
    is_operational = True

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        *,
        is_operational: bool | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if is_operational is not None:
            self.is_operational = is_operational
        self.metadata = metadata or {}

    def to_dict(self) -> dict:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "statusCode": self.status_code,
            "metadata": self.metadata,
        }


class ValidationError(AppError):
    """400-level input problem."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: str | None = None, metadata: dict | None = None):
        meta = dict(metadata or {})
        if field is not None:
            meta["field"] = field
        super().__init__(message, metadata=meta)
        self.field = field


class AuthError(AppError):
    """401: AUTH_REQUIRED, AUTH_INVALID or AUTH_EXPIRED."""

    code = "AUTH_REQUIRED"
    status_code = 401

    def __init__(self, message: str, code: str = "AUTH_REQUIRED", metadata: dict | None = None):
        super().__init__(message, code=code, metadata=metadata)


class PermissionDeniedError(AppError):
    code = "PERMISSION_DENIED"
    status_code = 403

    def __init__(self, message: str, required_permission: str | list[str] | None = None):
        super().__init__(message, metadata={"requiredPermission": required_permission})
        self.required_permission = required_permission


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, identifier: str | None = None):
        suffix = f" with identifier '{identifier}'" if identifier else ""
        super().__init__(
            f"{resource}{suffix} not found",
            metadata={"resource": resource, "identifier": identifier},
        )


class ConflictError(AppError):
    """409-level uniqueness conflict (e.g., duplicate active barcode)."""

    code = "CONFLICT"
    status_code = 409

    def __init__(self, message: str, conflicting_field: str | None = None):
        super().__init__(message, metadata={"conflictingField": conflicting_field})
        self.conflicting_field = conflicting_field


class BusinessRuleError(AppError):
    """422: a lifecycle rule or guard rejected an otherwise well-formed request."""

    status_code = 422

    def __init__(self, message: str, code: str, metadata: dict | None = None):
        super().__init__(message, code=code, metadata=metadata)


class DatabaseError(AppError):
    code = "DB_ERROR"
    status_code = 500
    is_operational = False


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    status_code = 500
    is_operational = False

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)


def normalize_error(exc: BaseException) -> AppError:
    """Coerce any exception into an AppError; unknown ones become InternalError."""
    if isinstance(exc, AppError):
        return exc
    return InternalError()
