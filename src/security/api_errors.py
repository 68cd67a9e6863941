"""
Unified API Error Response System.

Request/response operations (verification, account deletion, inbox,
rejection notices) fail with one of six categorized errors. Every error
leaves the API in the same JSON shape so clients can branch on ``code``.

Usage:
    from security.api_errors import APIError, ErrorCode

    raise APIError(
        code=ErrorCode.NOT_FOUND,
        message="User not found",
    )
"""

from __future__ import annotations

import logging
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.logging_config import request_id_var

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR CODES
# =============================================================================


class ErrorCode(str, Enum):
    """Error categories returned by callable operations."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    INTERNAL = "INTERNAL"


ERROR_CODE_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FAILED_PRECONDITION: status.HTTP_412_PRECONDITION_FAILED,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Map plain HTTP errors (routing, auth schemes) onto the categories
STATUS_CODE_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.INVALID_ARGUMENT,
    401: ErrorCode.UNAUTHENTICATED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.INVALID_ARGUMENT,
    412: ErrorCode.FAILED_PRECONDITION,
    422: ErrorCode.INVALID_ARGUMENT,
}


# =============================================================================
# ERROR RESPONSE MODELS
# =============================================================================


class FieldError(BaseModel):
    """Individual field validation error."""
    field: str = Field(..., description="Field name that caused the error")
    message: str = Field(..., description="Error message for this field")
    code: str = Field(default="invalid", description="Error code for this field")


class ErrorResponse(BaseModel):
    """
    Standardized API error response.

    All API errors return this format for consistent client handling.
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "error": True,
            "code": "PERMISSION_DENIED",
            "message": "Barangay admins cannot delete other admins",
            "status_code": 403,
            "timestamp": "2026-01-29T12:00:00Z",
            "request_id": "550e8400-e29b-41d4-a716-446655440000",
            "path": "/api/admin/users/delete",
            "details": None,
        }
    })

    error: bool = Field(default=True, description="Always true for errors")
    code: str = Field(..., description="Error code from ErrorCode enum")
    message: str = Field(..., description="Human-readable error message")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    request_id: str = Field(..., description="Unique request identifier for tracking")
    path: Optional[str] = Field(None, description="Request path that caused the error")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    field_errors: Optional[List[FieldError]] = Field(None, description="Field-specific validation errors")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# =============================================================================
# API ERROR EXCEPTION
# =============================================================================


class APIError(Exception):
    """
    Categorized error raised by request/response operations.

    Usage:
        raise APIError(
            code=ErrorCode.PERMISSION_DENIED,
            message="Only admins can delete users",
        )
    """

    def __init__(
        self,
        code: Union[ErrorCode, str],
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        log_error: bool = True,
    ):
        self.code = code if isinstance(code, ErrorCode) else ErrorCode(code)
        self.message = message
        self.status_code = status_code or ERROR_CODE_STATUS_MAP.get(
            self.code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        self.details = details
        self.log_error = log_error
        super().__init__(message)

    def __repr__(self) -> str:
        return f"APIError({self.code.value}, {self.message!r})"

    def to_response(self, request_id: str, path: Optional[str] = None) -> ErrorResponse:
        """Convert to ErrorResponse model."""
        return ErrorResponse(
            error=True,
            code=self.code.value,
            message=self.message,
            status_code=self.status_code,
            timestamp=_timestamp(),
            request_id=request_id,
            path=path,
            details=self.details,
        )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def get_request_id(request: Request) -> str:
    """Get or generate request ID for tracking."""
    request_id = request.headers.get("X-Request-ID")
    if not request_id:
        request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = str(uuid.uuid4())
    return request_id


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Call this in your app initialization:
        from security.api_errors import register_exception_handlers
        register_exception_handlers(app)
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Handle APIError exceptions."""
        request_id = get_request_id(request)

        if exc.log_error:
            log_level = logging.WARNING if exc.status_code < 500 else logging.ERROR
            logger.log(
                log_level,
                f"[{request_id}] APIError: {exc.code.value} - {exc.message}",
                extra={
                    "request_id": request_id,
                    "error_code": exc.code.value,
                    "status_code": exc.status_code,
                    "path": request.url.path,
                    "method": request.method,
                }
            )

        response = exc.to_response(request_id, request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle Pydantic validation errors."""
        request_id = get_request_id(request)

        field_errors = []
        for error in exc.errors():
            field_path = ".".join(str(loc) for loc in error["loc"] if loc != "body")
            field_errors.append(FieldError(
                field=field_path or "body",
                message=error["msg"],
                code=error["type"],
            ))

        logger.warning(
            f"[{request_id}] Validation error: {len(field_errors)} field(s)",
            extra={"request_id": request_id, "path": request.url.path}
        )

        response = ErrorResponse(
            error=True,
            code=ErrorCode.INVALID_ARGUMENT.value,
            message="Request validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            timestamp=_timestamp(),
            request_id=request_id,
            path=request.url.path,
            field_errors=field_errors,
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle standard HTTP exceptions."""
        request_id = get_request_id(request)
        error_code = STATUS_CODE_MAP.get(exc.status_code, ErrorCode.INTERNAL)

        logger.warning(
            f"[{request_id}] HTTP {exc.status_code}: {exc.detail}",
            extra={"request_id": request_id, "path": request.url.path}
        )

        response = ErrorResponse(
            error=True,
            code=error_code.value,
            message=str(exc.detail) if exc.detail else "An error occurred",
            status_code=exc.status_code,
            timestamp=_timestamp(),
            request_id=request_id,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id, **(getattr(exc, "headers", None) or {})}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global catch-all exception handler.

        SECURITY: Never expose internal error details to clients.
        """
        request_id = get_request_id(request)

        logger.error(
            f"[{request_id}] Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "traceback": traceback.format_exc(),
            },
            exc_info=True
        )

        response = ErrorResponse(
            error=True,
            code=ErrorCode.INTERNAL.value,
            message="An unexpected error occurred. Please try again later.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            timestamp=_timestamp(),
            request_id=request_id,
            path=request.url.path,
            details={"support": f"Reference ID: {request_id}"},
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id}
        )


# =============================================================================
# REQUEST ID MIDDLEWARE
# =============================================================================


class RequestIDMiddleware:
    """
    Middleware to add request ID to all requests.

    The id is also bound to the logging context for the request's lifetime.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(b"x-request-id", b"").decode() or str(uuid.uuid4())

        scope["state"] = scope.get("state", {})
        scope["state"]["request_id"] = request_id

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                response_headers = list(message.get("headers", []))
                if not any(name.lower() == b"x-request-id" for name, _ in response_headers):
                    response_headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = response_headers
            await send(message)

        token = request_id_var.set(request_id)
        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            request_id_var.reset(token)
