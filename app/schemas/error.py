"""
Error response schemas for API documentation and consistent error formatting.
Provides standardized error response models for OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["price"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Input should be greater than or equal to 0"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["greater_than_equal"]
    )

    input: Optional[Any] = Field(
        None,
        description="Input value that caused the error"
    )


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(
        ...,
        description="Error code identifier",
        examples=["NOT_FOUND"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Listing not found"]
    )

    timestamp: str = Field(
        ...,
        description="Error timestamp in ISO format",
        examples=["2024-01-01T00:00:00Z"]
    )

    request_id: Optional[str] = Field(
        None,
        description="Unique request identifier for tracking",
        examples=["abc12345"]
    )

    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Detailed error information for validation errors"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(
        ...,
        description="Error information"
    )


def _error_example(code: str, message: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": "2024-01-01T00:00:00Z",
            "request_id": "abc12345"
        }
    }


# Common error response examples for documentation
COMMON_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {
        "description": "Bad Request - Invalid request or status transition",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "BAD_REQUEST", "Cannot change listing status from SOLD to DRAFT"
        )}},
    },
    401: {
        "description": "Unauthorized - Missing, invalid or expired session",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "UNAUTHORIZED", "Authentication required"
        )}},
    },
    403: {
        "description": "Forbidden - Role or ownership requirement not met",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "FORBIDDEN", "You do not have permission to update this listing"
        )}},
    },
    404: {
        "description": "Not Found - Resource does not exist",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "NOT_FOUND", "Listing not found"
        )}},
    },
    409: {
        "description": "Conflict - Resource already exists",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "CONFLICT", "User with this email already exists"
        )}},
    },
    422: {
        "description": "Unprocessable Entity - Request validation failed",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "VALIDATION_ERROR", "Request validation failed"
        )}},
    },
    500: {
        "description": "Internal Server Error",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _error_example(
            "INTERNAL_SERVER_ERROR", "An unexpected error occurred"
        )}},
    },
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response definitions for specific status codes.

    Args:
        *status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response definitions for FastAPI `responses=`
    """
    return {code: COMMON_ERROR_RESPONSES[code] for code in status_codes if code in COMMON_ERROR_RESPONSES}


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Error responses shared by authenticated listing mutations."""
    return get_error_responses(401, 403, 404, 422, 500)
