"""Exception handlers producing a uniform error body without leaking internals.

Every failure is answered with ``{error, message, details?, status_code}``.
Unexpected errors additionally carry a ``correlation_id`` that also appears
in the server log.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, DisconnectionError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from rbac_api.config import get_settings
from rbac_api.exceptions import DatabaseError, DatabaseErrorCode, RbacAPIError, UnknownError
from rbac_api.utils.request_id import get_request_id
from rbac_api.utils.secure_logging import log_error

logger = logging.getLogger(__name__)

# Short error labels per status code
SAFE_ERROR_MESSAGES = {
    400: "Invalid request",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    405: "Method not allowed",
    409: "Conflict with existing resource",
    422: "Invalid input data",
    429: "Too many requests",
    500: "Internal server error",
    502: "Service unavailable",
    503: "Service temporarily unavailable",
}

# Message fragments SQLite uses in place of SQLSTATE codes
_SQLITE_CONSTRAINT_MESSAGES = {
    "unique constraint failed": DatabaseErrorCode.UNIQUE_VIOLATION,
    "foreign key constraint failed": DatabaseErrorCode.FOREIGN_KEY_VIOLATION,
    "not null constraint failed": DatabaseErrorCode.NOT_NULL_VIOLATION,
    "check constraint failed": DatabaseErrorCode.CHECK_VIOLATION,
}


def _get_cors_headers(request: Request) -> dict[str, str]:
    """Get CORS headers for error responses.

    Exception handlers run outside the CORS middleware, so allowed origins
    must be echoed here for browsers to read the error body.
    """
    origin = request.headers.get("origin")
    if origin and origin in get_settings().cors_origins_list:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
        }
    return {}


def error_body(
    error: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None,
) -> dict[str, Any]:
    """Build the JSON body shared by every error response."""
    body: dict[str, Any] = {"error": error, "message": message, "status_code": status_code}
    if details:
        body["details"] = details
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def classify_database_error(exc: SQLAlchemyError) -> DatabaseErrorCode:
    """Map a SQLAlchemy exception to a database error code.

    PostgreSQL drivers expose the SQLSTATE; SQLite only offers a message.

    Args:
        exc: Exception raised by SQLAlchemy

    Returns:
        Matching DatabaseErrorCode
    """
    if isinstance(exc, DisconnectionError):
        return DatabaseErrorCode.CONNECTION_FAILURE

    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        sqlstate = str(sqlstate)
        if sqlstate.startswith("08") or sqlstate == "53300":
            return DatabaseErrorCode.CONNECTION_FAILURE
        for code in DatabaseErrorCode:
            if code.value == sqlstate:
                return code
        return DatabaseErrorCode.UNKNOWN

    message = str(orig if orig is not None else exc).lower()
    for fragment, code in _SQLITE_CONSTRAINT_MESSAGES.items():
        if fragment in message:
            return code
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return DatabaseErrorCode.CONNECTION_FAILURE
    return DatabaseErrorCode.UNKNOWN


async def rbac_api_exception_handler(request: Request, exc: RbacAPIError) -> JSONResponse:
    """Handle domain exceptions raised by services.

    Args:
        request: FastAPI request
        exc: Domain exception

    Returns:
        JSONResponse with the exception's status code
    """
    correlation_id = None
    if exc.status_code >= 500:
        correlation_id = get_request_id(request)
        log_error(logger, f"{type(exc).__name__} [{correlation_id}]", exc)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.message, exc.status_code, exc.details, correlation_id),
        headers=_get_cors_headers(request),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with sanitized messages.

    Args:
        request: FastAPI request
        exc: HTTP exception

    Returns:
        JSONResponse with sanitized error
    """
    error = SAFE_ERROR_MESSAGES.get(exc.status_code, "Request failed")
    if get_settings().debug or isinstance(exc.detail, str) and exc.status_code < 500:
        message = str(exc.detail)
    else:
        message = error

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error, message, exc.status_code),
        headers={**(exc.headers or {}), **_get_cors_headers(request)},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn request validation failures into a 400 with per-field messages.

    Args:
        request: FastAPI request
        exc: Validation exception

    Returns:
        JSONResponse with field errors
    """
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append(
            {
                "field": ".".join(loc) or "body",
                "message": error.get("msg", "Invalid value"),
            }
        )

    logger.warning(f"Validation error on {request.method} {request.url.path}: {fields}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "Validation error",
            "Invalid input data",
            status.HTTP_400_BAD_REQUEST,
            {"fields": fields},
        ),
        headers=_get_cors_headers(request),
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy exceptions without leaking database details.

    Args:
        request: FastAPI request
        exc: SQLAlchemy exception

    Returns:
        JSONResponse with a fixed user-facing message
    """
    code = classify_database_error(exc)
    error = DatabaseError(code)
    correlation_id = get_request_id(request)
    log_error(logger, f"Database error {code.value} [{correlation_id}]", exc)

    return JSONResponse(
        status_code=error.status_code,
        content=error_body(
            error.error, error.message, error.status_code, error.details, correlation_id
        ),
        headers=_get_cors_headers(request),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking information.

    Args:
        request: FastAPI request
        exc: Unexpected exception

    Returns:
        JSONResponse with generic error and correlation ID
    """
    correlation_id = get_request_id(request)
    log_error(logger, f"Unhandled exception for {request.url.path} [{correlation_id}]", exc)

    error = UnknownError(
        "An unexpected error occurred. Please try again later.",
        {"type": type(exc).__name__} if get_settings().debug else None,
    )
    return JSONResponse(
        status_code=error.status_code,
        content=error_body(
            error.error, error.message, error.status_code, error.details, correlation_id
        ),
        headers=_get_cors_headers(request),
    )
