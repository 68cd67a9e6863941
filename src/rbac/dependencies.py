"""
FastAPI Dependencies

Dependency injection helpers for route protection.

Usage:
    from rbac.dependencies import require_caller

    @router.post("/verification/email/send")
    async def send_code(caller: CallerContext = Depends(require_caller)):
        ...
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt

from config.settings import Settings, get_settings
from services.logging_config import user_id_var

from .context import CallerContext
from .jwt import decode_token

logger = logging.getLogger(__name__)


# =============================================================================
# HTTP BEARER SECURITY
# =============================================================================

security = HTTPBearer(auto_error=False)


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


# =============================================================================
# CORE DEPENDENCIES
# =============================================================================

async def get_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CallerContext:
    """
    Get the caller context for the current request.

    Does NOT enforce authentication - use require_caller for that.
    """
    if hasattr(request.state, "caller"):
        return request.state.caller

    if credentials is None:
        return CallerContext.anonymous()

    try:
        payload = decode_token(credentials.credentials, _settings(request))
    except jwt.ExpiredSignatureError:
        logger.debug("Expired bearer token")
        return CallerContext.anonymous()
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid JWT token: {e}")
        return CallerContext.anonymous()

    caller = CallerContext(uid=str(payload["sub"]), email=payload.get("email"))
    request.state.caller = caller
    user_id_var.set(caller.uid)
    return caller


async def require_caller(caller: CallerContext = Depends(get_caller)) -> CallerContext:
    """Require an authenticated caller (UNAUTHENTICATED otherwise)."""
    caller.require_uid()
    return caller
