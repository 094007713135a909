"""Domain-specific exceptions for the RBAC API.

These exceptions provide a clean separation between service-layer errors
and HTTP responses, avoiding string matching in routers. Each class carries
the HTTP status code the error handler answers with.
"""

from enum import Enum
from typing import Any


class RbacAPIError(Exception):
    """Base exception for all RBAC API errors."""

    status_code: int = 500
    error: str = "Request failed"

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Network Errors (503)
# =============================================================================


class NetworkError(RbacAPIError):
    """Raised when a remote service cannot be reached."""

    status_code = 503
    error = "Network error"


class ServiceUnavailableError(RbacAPIError):
    """Raised when a dependent service is not configured or not responding."""

    status_code = 503
    error = "Service unavailable"


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(RbacAPIError):
    """Base class for validation errors."""

    status_code = 400
    error = "Validation error"


# =============================================================================
# Authentication / Authorization Errors (401 / 403)
# =============================================================================


class AuthenticationError(RbacAPIError):
    """Raised when the caller is not authenticated."""

    status_code = 401
    error = "Authentication required"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AuthorizationError(RbacAPIError):
    """Raised when the caller lacks access to the operation."""

    status_code = 403
    error = "Access denied"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


# =============================================================================
# Database Errors
# =============================================================================


class DatabaseErrorCode(str, Enum):
    """Database failure kinds, keyed by the SQLSTATE they come from."""

    UNIQUE_VIOLATION = "23505"
    FOREIGN_KEY_VIOLATION = "23503"
    NOT_NULL_VIOLATION = "23502"
    CHECK_VIOLATION = "23514"
    INSUFFICIENT_PRIVILEGE = "42501"
    NOT_FOUND = "not_found"
    CONNECTION_FAILURE = "08006"
    UNKNOWN = "unknown"


# status code, short error, user-facing message
DATABASE_ERROR_MAPPINGS: dict[DatabaseErrorCode, tuple[int, str, str]] = {
    DatabaseErrorCode.UNIQUE_VIOLATION: (
        409,
        "Duplicate entry",
        "A record with this information already exists. Please use different values.",
    ),
    DatabaseErrorCode.FOREIGN_KEY_VIOLATION: (
        409,
        "Reference constraint violation",
        "This record is referenced by other records or references a missing record.",
    ),
    DatabaseErrorCode.NOT_NULL_VIOLATION: (
        400,
        "Not null violation",
        "Required information is missing. Please fill in all required fields.",
    ),
    DatabaseErrorCode.CHECK_VIOLATION: (
        400,
        "Check constraint violation",
        "The provided data does not meet the required criteria.",
    ),
    DatabaseErrorCode.INSUFFICIENT_PRIVILEGE: (
        403,
        "Insufficient privilege",
        "You do not have permission to perform this action.",
    ),
    DatabaseErrorCode.NOT_FOUND: (
        404,
        "Not found",
        "The requested record was not found.",
    ),
    DatabaseErrorCode.CONNECTION_FAILURE: (
        503,
        "Connection failure",
        "Unable to connect to the database. Please try again later.",
    ),
    DatabaseErrorCode.UNKNOWN: (
        500,
        "Database error",
        "An unexpected database error occurred. Please try again.",
    ),
}


class DatabaseError(RbacAPIError):
    """Raised for storage failures, sub-typed by constraint code.

    The message is always the fixed user-facing text for the code, never
    the raw database message.
    """

    def __init__(self, code: DatabaseErrorCode = DatabaseErrorCode.UNKNOWN) -> None:
        self.code = code
        self.status_code, self.error, message = DATABASE_ERROR_MAPPINGS[code]
        super().__init__(message, {"code": code.value})


# =============================================================================
# Business Logic Errors
# =============================================================================


class BusinessLogicError(RbacAPIError):
    """Base class for domain rule violations."""

    status_code = 400
    error = "Business rule violation"


class NotFoundError(BusinessLogicError):
    """Base class for resource not found errors."""

    status_code = 404
    error = "Not found"


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission cannot be found."""

    error = "Permission does not exist"

    def __init__(self, permission_id: str | None = None, name: str | None = None) -> None:
        message = f'Permission "{name}" not found' if name else "Permission not found"
        details: dict[str, Any] = {}
        if permission_id:
            details["permission_id"] = str(permission_id)
        if name:
            details["name"] = name
        super().__init__(message, details)


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be found."""

    error = "Role does not exist"

    def __init__(self, role_id: str | None = None, name: str | None = None) -> None:
        message = f'Role "{name}" not found' if name else "Role not found"
        details: dict[str, Any] = {}
        if role_id:
            details["role_id"] = str(role_id)
        if name:
            details["name"] = name
        super().__init__(message, details)


class AssociationNotFoundError(NotFoundError):
    """Raised when a role does not hold the given permission."""

    error = "Association does not exist"

    def __init__(self, role_label: str, permission_label: str) -> None:
        super().__init__(
            f'Role "{role_label}" does not have permission "{permission_label}"',
            {"role": role_label, "permission": permission_label},
        )


class ConflictError(BusinessLogicError):
    """Base class for resource conflict errors."""

    status_code = 409
    error = "Conflict"


class PermissionAlreadyExistsError(ConflictError):
    """Raised when trying to create a permission that already exists."""

    error = "Duplicate permission name"

    def __init__(self, name: str) -> None:
        super().__init__(f'Permission "{name}" already exists', {"name": name})


class RoleAlreadyExistsError(ConflictError):
    """Raised when trying to create a role that already exists."""

    error = "Duplicate role name"

    def __init__(self, name: str) -> None:
        super().__init__(f'Role "{name}" already exists', {"name": name})


class AssociationAlreadyExistsError(ConflictError):
    """Raised when a role already holds the given permission."""

    error = "Association already exists"

    def __init__(self, role_label: str, permission_label: str) -> None:
        super().__init__(
            f'Role "{role_label}" already has permission "{permission_label}"',
            {"role": role_label, "permission": permission_label},
        )


# =============================================================================
# Everything else (500)
# =============================================================================


class UnknownError(RbacAPIError):
    """Raised for failures that fit no other category."""

    status_code = 500
    error = "Internal server error"
