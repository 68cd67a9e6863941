"""
JWT Token Handling

Bearer tokens are issued by the managed auth service; this module only
verifies them. ``create_access_token`` exists for local development and
tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt

from config.settings import Settings, get_settings


JWT_ACCESS_TOKEN_EXPIRE_HOURS = 1


# =============================================================================
# TOKEN CREATION
# =============================================================================

def create_access_token(
    uid: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        uid: User id (becomes the ``sub`` claim)
        email: Optional email claim
        expires_delta: Custom expiration time
        settings: Settings carrying the signing key

    Returns:
        JWT token string
    """
    settings = settings or get_settings()
    if expires_delta is None:
        expires_delta = timedelta(hours=JWT_ACCESS_TOKEN_EXPIRE_HOURS)

    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": uid,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


# =============================================================================
# TOKEN DECODING
# =============================================================================

def decode_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string
        settings: Settings carrying the verification key

    Returns:
        Token payload as dictionary

    Raises:
        jwt.InvalidTokenError: If token is invalid, expired, or has no subject
    """
    settings = settings or get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )

