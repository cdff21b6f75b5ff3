"""
Application error hierarchy and JSON error envelope.

Every handled failure surfaces to the client as:

    {
        "success": false,
        "error": {
            "message": "...",
            "type": "NotFoundError",
            "statusCode": 404,
            "timestamp": "2024-01-01T00:00:00+00:00",
            ...
        }
    }

Services raise these errors; the exception handlers registered in main.py
convert them to responses.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import status
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

# SQL Server error numbers
SQLSERVER_UNIQUE_VIOLATION = 2627
SQLSERVER_UNIQUE_INDEX_VIOLATION = 2601
SQLSERVER_FOREIGN_KEY_VIOLATION = 547


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        is_operational: bool = True,
        details: Optional[Any] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.is_operational = is_operational
        self.details = details
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        error = {
            "message": self.message,
            "type": type(self).__name__,
            "statusCode": self.status_code,
            "timestamp": self.timestamp,
        }
        if self.details is not None:
            error["details"] = self.details
        return error

    def to_response(self) -> dict:
        """Full response body for this error."""
        return {"success": False, "error": self.to_dict()}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access forbidden"):
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a record does not exist (or is soft deleted)."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        resource: str,
        identifier: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        self.resource = resource
        self.identifier = identifier
        if message is None and identifier is not None:
            message = f"{resource} not found with identifier: {identifier}"
        elif message is None:
            message = f"{resource} not found"
        super().__init__(message)

    def to_dict(self) -> dict:
        error = super().to_dict()
        error["resource"] = self.resource
        if self.identifier is not None:
            error["identifier"] = str(self.identifier)
        return error


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str):
        super().__init__(message)


class DatabaseError(AppError):
    """Unexpected database failure. Not safe to show details to clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}", is_operational=False)


class DatabaseConnectionError(AppError):
    """A connection pool for a database could not be established."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, database_name: Optional[str], original_error: Optional[Exception] = None):
        self.database_name = database_name
        self.original_error = original_error
        super().__init__(
            f"Database connection error: {database_name}", is_operational=False
        )


def _sqlserver_error_number(exc: IntegrityError) -> Optional[int]:
    """
    Extract the native SQL Server error number from a DBAPI error.

    pyodbc reports it inside the message, e.g. "... (2627) ...".
    """
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    text = " ".join(str(arg) for arg in getattr(orig, "args", ()))
    for number in (
        SQLSERVER_UNIQUE_VIOLATION,
        SQLSERVER_UNIQUE_INDEX_VIOLATION,
        SQLSERVER_FOREIGN_KEY_VIOLATION,
    ):
        if f"({number})" in text:
            return number
    return None


def _is_unique_violation(exc: IntegrityError) -> bool:
    number = _sqlserver_error_number(exc)
    if number in (SQLSERVER_UNIQUE_VIOLATION, SQLSERVER_UNIQUE_INDEX_VIOLATION):
        return True
    # SQLite and other drivers used in development
    return "UNIQUE constraint failed" in str(exc.orig)


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    if _sqlserver_error_number(exc) == SQLSERVER_FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY constraint failed" in str(exc.orig)


def handle_integrity_error(exc: IntegrityError, entity: str = "Record") -> AppError:
    """
    Map a constraint violation to the matching application error.

    Returns (does not raise) the error so callers can `raise ... from exc`.
    """
    if _is_unique_violation(exc):
        return ConflictError(f"{entity} already exists")
    if _is_foreign_key_violation(exc):
        return ValidationError(f"Referenced {entity} does not exist")
    logger.error(
        "Unhandled integrity error",
        extra={"entity": entity, "error": str(exc.orig)},
    )
    return DatabaseError("Constraint violation", original_error=exc)
