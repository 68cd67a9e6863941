"""
Callable operation results.

Soft outcomes (wrong code, email not sent) are returned, not raised; the
caller branches on ``success``.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class CallableResult(BaseModel):
    """Structured success/failure payload of a callable operation."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    results: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, message: Optional[str] = None, **results: Any) -> "CallableResult":
        return cls(success=True, message=message, results=results or None)

    @classmethod
    def failed(cls, message: Optional[str] = None, error: Optional[str] = None) -> "CallableResult":
        return cls(success=False, message=message, error=error)
