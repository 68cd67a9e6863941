"""
Security module for the Pollution Report backend.

Provides categorized API errors and the FastAPI handlers that render them.
"""

from .api_errors import (
    APIError,
    ErrorCode,
    ErrorResponse,
    RequestIDMiddleware,
    register_exception_handlers,
)

__all__ = [
    "APIError",
    "ErrorCode",
    "ErrorResponse",
    "RequestIDMiddleware",
    "register_exception_handlers",
]
