"""Tests for database error classification and error bodies."""

import json

import pytest
from fastapi import Request
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError

from rbac_api.config import Settings
from rbac_api.exceptions import (
    DATABASE_ERROR_MAPPINGS,
    DatabaseError,
    DatabaseErrorCode,
    UnknownError,
)
from rbac_api.middleware import error_handler
from rbac_api.middleware.error_handler import (
    classify_database_error,
    error_body,
    generic_exception_handler,
)


class PostgresDriverError(Exception):
    """Driver exception carrying a SQLSTATE like asyncpg's."""

    def __init__(self, sqlstate: str) -> None:
        super().__init__(f"SQLSTATE {sqlstate}")
        self.sqlstate = sqlstate


@pytest.mark.parametrize(
    ("sqlstate", "code", "status"),
    [
        ("23505", DatabaseErrorCode.UNIQUE_VIOLATION, 409),
        ("23503", DatabaseErrorCode.FOREIGN_KEY_VIOLATION, 409),
        ("23502", DatabaseErrorCode.NOT_NULL_VIOLATION, 400),
        ("23514", DatabaseErrorCode.CHECK_VIOLATION, 400),
        ("42501", DatabaseErrorCode.INSUFFICIENT_PRIVILEGE, 403),
        ("08006", DatabaseErrorCode.CONNECTION_FAILURE, 503),
        ("08001", DatabaseErrorCode.CONNECTION_FAILURE, 503),
        ("53300", DatabaseErrorCode.CONNECTION_FAILURE, 503),
        ("22P02", DatabaseErrorCode.UNKNOWN, 500),
    ],
)
def test_postgres_sqlstate_mapping(sqlstate: str, code: DatabaseErrorCode, status: int) -> None:
    exc = IntegrityError("INSERT", {}, PostgresDriverError(sqlstate))

    assert classify_database_error(exc) is code
    assert DatabaseError(code).status_code == status


@pytest.mark.parametrize(
    ("message", "code"),
    [
        ("UNIQUE constraint failed: permissions.name", DatabaseErrorCode.UNIQUE_VIOLATION),
        ("FOREIGN KEY constraint failed", DatabaseErrorCode.FOREIGN_KEY_VIOLATION),
        ("NOT NULL constraint failed: roles.name", DatabaseErrorCode.NOT_NULL_VIOLATION),
        ("no such table: roles", DatabaseErrorCode.UNKNOWN),
    ],
)
def test_sqlite_message_mapping(message: str, code: DatabaseErrorCode) -> None:
    exc = IntegrityError("INSERT", {}, Exception(message))

    assert classify_database_error(exc) is code


def test_disconnect_is_connection_failure() -> None:
    assert classify_database_error(DisconnectionError()) is DatabaseErrorCode.CONNECTION_FAILURE


def test_database_error_never_exposes_driver_message() -> None:
    exc = OperationalError("SELECT", {}, Exception("password authentication failed for user x"))
    error = DatabaseError(classify_database_error(exc))

    assert "password" not in error.message
    assert error.message == DATABASE_ERROR_MAPPINGS[DatabaseErrorCode.UNKNOWN][2]


def test_error_body_omits_empty_fields() -> None:
    assert error_body("Not found", "Role not found", 404) == {
        "error": "Not found",
        "message": "Role not found",
        "status_code": 404,
    }
    body = error_body("Internal server error", "Oops", 500, {"type": "KeyError"}, "abc")
    assert body["details"] == {"type": "KeyError"}
    assert body["correlation_id"] == "abc"


def make_request() -> Request:
    return Request({"type": "http", "method": "GET", "path": "/api/v1/roles", "headers": []})


async def test_unexpected_exception_becomes_internal_error() -> None:
    response = await generic_exception_handler(make_request(), KeyError("secret_column"))

    body = json.loads(response.body)
    assert response.status_code == 500
    assert body["error"] == UnknownError.error
    assert body["message"] == "An unexpected error occurred. Please try again later."
    assert body["correlation_id"]
    assert "details" not in body
    assert "secret_column" not in response.body.decode()


async def test_unexpected_exception_type_shown_in_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(error_handler, "get_settings", lambda: Settings(debug=True))

    response = await generic_exception_handler(make_request(), KeyError("secret_column"))

    assert json.loads(response.body)["details"] == {"type": "KeyError"}
