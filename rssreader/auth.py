"""
Authentication module for API access control.

The reader sits behind an auth provider that forwards the signed-in user as
the X-User-Id header. Supports three modes:
1. Dev mode - DEV_USER_ID is used when no X-User-Id header is sent
2. Trusted header - X-User-Id identifies the user
3. Trusted header + API key - when AUTH_API_KEY is set, X-API-Key must match

The resulting AuthContext is passed explicitly into every service call.
"""

import secrets
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from .config import config
from .exceptions import AuthError

# Header names
API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)
USER_ID_HEADER = APIKeyHeader(name="X-User-Id", auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the user a request acts for."""
    user_id: str


def get_auth_context(
    api_key: str | None = Security(API_KEY_HEADER),
    user_id: str | None = Security(USER_ID_HEADER),
) -> AuthContext:
    """
    Resolve the caller's identity from request headers.

    Raises:
        AuthError: If the API key is missing or wrong, or no identity is available
    """
    configured_key = config.AUTH_API_KEY

    if configured_key:
        if not api_key:
            raise AuthError("Missing API key. Provide X-API-Key header.")
        # Use constant-time comparison to prevent timing attacks
        if not secrets.compare_digest(api_key, configured_key):
            raise AuthError("Invalid API key")

    user_id = (user_id or "").strip() or config.DEV_USER_ID
    if not user_id:
        raise AuthError("Missing user identity. Provide X-User-Id header.")

    return AuthContext(user_id=user_id)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
