"""
Error response formatting for the global exception handlers.
Every non-auth failure leaves the API as {"error": {code, message, timestamp, request_id}}.
"""

from typing import Dict, Any, Mapping, Optional, List
from datetime import datetime, timezone
from fastapi import Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from app.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)

# Substrings of driver messages (SQLite and PostgreSQL) mapped to client-safe text
CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """Builds JSON error responses and logs each failure once."""

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the error body.

        Args:
            error_code: Machine-readable code, e.g. NOT_FOUND
            message: Human-readable message
            details: Per-field validation problems
            request_id: Id shared with the X-Request-ID header
        """
        error: Dict[str, Any] = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
        }
        if details:
            error["details"] = details
        if request_id:
            error["request_id"] = request_id
        return {"error": error}

    @classmethod
    def _respond(
        cls,
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> JSONResponse:
        body = cls.format_error_response(error_code, message, details, cls._get_request_id(request))
        return JSONResponse(status_code=status_code, content=body, headers=headers)

    @staticmethod
    def _path(request: Optional[Request]) -> Optional[str]:
        return request.url.path if request else None

    @classmethod
    def handle_api_exception(cls, exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """Domain errors raised by services, guards and dependencies."""
        error_code = exception.error_code or "API_ERROR"
        logger.warning(
            f"{error_code} on {cls._path(request)}: {exception.detail}",
            extra={"status_code": exception.status_code, "path": cls._path(request)}
        )
        return cls._respond(request, exception.status_code, error_code, exception.detail, headers=exception.headers)

    @classmethod
    def handle_validation_error(
        cls,
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Request body, path and query validation failures (422).
        Each detail names the field by its location, e.g. "body -> title -> en".
        """
        details = [
            {
                "field": " -> ".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
                "input": jsonable_encoder(
                    error.get("input"),
                    custom_encoder={bytes: lambda raw: raw.decode(errors="replace")}
                ),
            }
            for error in exception.errors()
        ]

        logger.warning(f"Rejected request to {cls._path(request)}: {len(details)} invalid field(s)")
        return cls._respond(request, 422, "VALIDATION_ERROR", "Request validation failed", details=details)

    @classmethod
    def handle_database_error(cls, exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """Integrity violations become 409; any other database failure is a 500."""
        if isinstance(exception, IntegrityError):
            reason = cls._describe_constraint(exception)
            message = f"Constraint violation: {reason}" if reason else "Data integrity constraint violation"
            logger.warning(f"Integrity error on {cls._path(request)}: {exception.orig}")
            return cls._respond(request, 409, "INTEGRITY_ERROR", message)

        logger.error(f"Database error on {cls._path(request)}: {exception}", exc_info=True)
        return cls._respond(request, 500, "DATABASE_ERROR", "Database operation failed")

    @classmethod
    def handle_http_exception(cls, exception: HTTPException, request: Optional[Request] = None) -> JSONResponse:
        """Framework-level errors such as unknown routes (404) and wrong methods (405)."""
        logger.info(f"HTTP {exception.status_code} on {cls._path(request)}: {exception.detail}")
        return cls._respond(
            request,
            exception.status_code,
            f"HTTP_{exception.status_code}",
            str(exception.detail),
            headers=getattr(exception, "headers", None)
        )

    @classmethod
    def handle_unexpected_error(cls, exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """Anything else. The client gets a generic message; the traceback goes to the log."""
        logger.error(
            f"Unhandled {type(exception).__name__} on {cls._path(request)}: {exception}",
            exc_info=exception
        )
        return cls._respond(
            request, 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."
        )

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Reuse the id assigned by the request middleware, or mint one."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return uuid.uuid4().hex[:8]

    @staticmethod
    def _describe_constraint(exception: IntegrityError) -> Optional[str]:
        driver_message = str(exception.orig).lower()
        for needle, description in CONSTRAINT_MESSAGES:
            if needle in driver_message:
                return description
        return None
