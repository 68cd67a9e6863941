"""
Caller Context

CallerContext is the object passed through callable routes describing who
is making the request. Only the identity comes from the bearer token; role
and barangay are read from the caller's profile document when an
operation needs them.
"""

from dataclasses import dataclass
from typing import Optional

from security.api_errors import APIError, ErrorCode


@dataclass(frozen=True)
class CallerContext:
    """
    Authenticated (or anonymous) caller of a request.

    Usage:
        @router.post("/verification/email/send")
        async def send_code(caller: CallerContext = Depends(require_caller)):
            return await service.issue(caller.require_uid())
    """

    uid: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.uid)

    @classmethod
    def anonymous(cls) -> "CallerContext":
        return cls()

    def require_uid(self) -> str:
        """Return the caller's uid or fail with UNAUTHENTICATED."""
        if not self.uid:
            raise APIError(ErrorCode.UNAUTHENTICATED, "User must be authenticated")
        return self.uid
