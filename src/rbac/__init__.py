"""
Caller identity for the Pollution Report backend.

- CallerContext: who is making a request
- IdentityProvider: seam over the managed authentication service
- Bearer token verification (PyJWT) and FastAPI dependencies
"""

from .context import CallerContext
from .identity import (
    IdentityError,
    IdentityNotFoundError,
    IdentityProvider,
    IdentityRecord,
    InMemoryIdentityProvider,
    InvalidEmailError,
)
from .jwt import create_access_token, decode_token

__all__ = [
    "CallerContext",
    "IdentityError",
    "IdentityNotFoundError",
    "IdentityProvider",
    "IdentityRecord",
    "InMemoryIdentityProvider",
    "InvalidEmailError",
    "create_access_token",
    "decode_token",
]
