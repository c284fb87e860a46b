"""
Bearer authentication gate.

Reads the access token from ``Authorization: Bearer <token>`` (falling back
to the ``x-auth-token`` header), verifies it and exposes the identity it
carries. No database lookup happens here; the role is the one the token
was issued with.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from modules.auth.exceptions import InvalidTokenError, MissingTokenError
from modules.auth.tokens import TokenService
from shared.exceptions import EcoLearnError
from shared.models import AuthenticatedUser

from ..dependencies import get_token_service

logger = logging.getLogger(__name__)

# Token extractors; neither raises on its own so the gate controls the error shape
bearer_scheme = HTTPBearer(auto_error=False)
auth_token_header = APIKeyHeader(name="x-auth-token", auto_error=False)


def extract_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    header_token: Optional[str],
) -> Optional[str]:
    """Pick the bearer credential if present, else the fallback header."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    if header_token:
        return header_token.strip() or None
    return None


def authenticate_token(token: str, tokens: TokenService) -> AuthenticatedUser:
    """
    Verify an access token and convert its claims to an AuthenticatedUser.

    Raises:
        InvalidTokenError: For any verification failure, expiry included
    """
    try:
        claims = tokens.verify_access_token(token)
    except EcoLearnError as e:
        # Clients only learn that the token is unusable
        raise InvalidTokenError("Invalid or expired token") from e

    return AuthenticatedUser(
        id=claims.user.id,
        email=claims.user.email,
        role=claims.user.role,
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    header_token: Optional[str] = Depends(auth_token_header),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = extract_token(credentials, header_token)
    if token is None:
        raise MissingTokenError()

    try:
        user = authenticate_token(token, tokens)
    except InvalidTokenError:
        client_ip = request.client.host if request.client else None
        logger.warning(f"Rejected access token (path={request.url.path}, ip={client_ip})")
        raise

    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    header_token: Optional[str] = Depends(auth_token_header),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[AuthenticatedUser]:
    """
    Dependency that optionally extracts user if authenticated.

    Use this for endpoints that work with or without authentication.
    """
    token = extract_token(credentials, header_token)
    if token is None:
        return None

    try:
        user = authenticate_token(token, tokens)
    except InvalidTokenError:
        return None

    request.state.user = user
    return user


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
