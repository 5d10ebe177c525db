"""
Custom exceptions and handlers for consistent API error responses.

Every error leaves the API as
``{"success": false, "error": ..., "error_code": ..., "path": ...}``
so that validation and conflict messages can be shown to staff directly.
"""

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error with consistent structure"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIError):
    """Missing or malformed request fields"""

    def __init__(
        self, detail: str = "Validation failed", error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class InvalidStatusTransitionError(ValidationError):
    """Requested status change is not in the transition map"""

    def __init__(self, current_status: str, requested_status: str):
        super().__init__(
            detail=(
                f"Invalid status transition from {current_status} "
                f"to {requested_status}"
            ),
            error_code="INVALID_STATUS_TRANSITION",
        )
        self.current_status = current_status
        self.requested_status = requested_status


class AuthenticationError(APIError):
    """Shared password did not match"""

    def __init__(
        self, detail: str = "Authentication failed", error_code: str = "AUTH_FAILED"
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
        )


class AuthorizationError(APIError):
    """Caller is not allowed to perform the action"""

    def __init__(
        self, detail: str = "Permission denied", error_code: str = "PERMISSION_DENIED"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN, detail=detail, error_code=error_code
        )


class NotFoundError(APIError):
    """Resource not found error"""

    def __init__(
        self, detail: str = "Resource not found", error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code
        )


class ConflictError(APIError):
    """Resource conflict error"""

    def __init__(self, detail: str = "Resource conflict", error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT, detail=detail, error_code=error_code
        )


class TableOccupiedError(ConflictError):
    """A table already has an active session"""

    def __init__(self, table_id: int):
        super().__init__(
            detail=f"Table {table_id} is already occupied",
            error_code="TABLE_OCCUPIED",
        )
        self.table_id = table_id


class PersistenceError(APIError):
    """Transaction failed and was rolled back"""

    def __init__(
        self,
        detail: str = "The operation could not be completed",
        error_code: str = "PERSISTENCE_ERROR",
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code,
        )


def _error_body(request: Request, message: Any, error_code: Optional[str]) -> dict:
    return {
        "success": False,
        "error": message,
        "error_code": error_code,
        "path": str(request.url.path),
    }


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.detail, exc.error_code),
        headers=exc.headers,
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report body/query validation failures as 400 with field details"""
    errors = exc.errors()
    logger.warning(f"Request validation failed at {request.url.path}: {errors}")
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    body = _error_body(request, "; ".join(messages) or "Validation failed",
                       "VALIDATION_ERROR")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
