"""
Authentication module.

Handles access and refresh tokens, the session lifecycle and role-based
access control.

Public API:
- IAuthService: Interface for session lifecycle operations
- IPasswordHasher / IRefreshTokenRepository: Storage and hashing seams
- Request and result models for the auth endpoints
- Auth exceptions: InvalidTokenError, ExpiredTokenError, RevokedTokenError, etc.

The token service, guards and routes are imported from their own modules
(``tokens``, ``rbac``, ``routes``) since they depend on the API layer.
"""

from .interfaces import IAuthService, IPasswordHasher, IRefreshTokenRepository
from .models import (
    AccessTokenClaims,
    AuthSession,
    DeviceInfo,
    IssuedRefreshToken,
    RefreshResult,
    RefreshTokenRecord,
    RegisterRequest,
    LoginRequest,
    ChangePasswordRequest,
)
from .exceptions import (
    MissingTokenError,
    InvalidTokenError,
    ExpiredTokenError,
    InvalidRefreshTokenError,
    RevokedTokenError,
    InvalidCredentialsError,
    AccountDeletedError,
    InvalidPasswordError,
    RoleNotAllowedError,
    InsufficientRoleError,
    InsufficientPermissionError,
    NotResourceOwnerError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IPasswordHasher",
    "IRefreshTokenRepository",
    # Models
    "AccessTokenClaims",
    "AuthSession",
    "DeviceInfo",
    "IssuedRefreshToken",
    "RefreshResult",
    "RefreshTokenRecord",
    "RegisterRequest",
    "LoginRequest",
    "ChangePasswordRequest",
    # Exceptions
    "MissingTokenError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "InvalidRefreshTokenError",
    "RevokedTokenError",
    "InvalidCredentialsError",
    "AccountDeletedError",
    "InvalidPasswordError",
    "RoleNotAllowedError",
    "InsufficientRoleError",
    "InsufficientPermissionError",
    "NotResourceOwnerError",
]
