"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught by the API error
boundary, which turns them into ``{success, error, code}`` responses.
Credential and token messages are deliberately generic; the ``code`` is what
clients branch on.
"""

from typing import Iterable

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
)


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authorization token missing"):
        super().__init__(message, code="TOKEN_MISSING")


class InvalidTokenError(AuthenticationError):
    """Raised when an access token is invalid or malformed."""

    def __init__(self, message: str = "Invalid access token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when an access or refresh token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class InvalidRefreshTokenError(AuthenticationError):
    """Raised when no refresh token record matches the presented value."""

    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message, code="INVALID_REFRESH_TOKEN")


class RevokedTokenError(AuthenticationError):
    """Raised when a revoked refresh token is presented."""

    def __init__(self, message: str = "Refresh token has been revoked"):
        super().__init__(message, code="TOKEN_REVOKED")


class InvalidCredentialsError(AuthenticationError):
    """Raised on login failure. Same message for unknown email and wrong password."""

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class AccountDeletedError(AuthenticationError):
    """Raised when a soft-deleted account tries to authenticate."""

    def __init__(self):
        super().__init__("Account has been deleted", code="ACCOUNT_DELETED")


class AccountNotFoundError(AuthenticationError):
    """Raised when a refresh token outlives the user that owns it."""

    def __init__(self):
        super().__init__("User not found", code="USER_NOT_FOUND")


class InvalidPasswordError(AuthenticationError):
    """Raised when the current password does not match on password change."""

    def __init__(self):
        super().__init__("Current password is incorrect", code="INVALID_PASSWORD")


class AuthenticationRequiredError(AuthenticationError):
    """Raised by an authorization guard that finds no authenticated identity."""

    def __init__(self):
        super().__init__("Authentication required", code="UNAUTHORIZED")


class RoleNotAllowedError(AuthorizationError):
    """Raised when registration requests a privileged role."""

    def __init__(self, role: str):
        super().__init__(
            "Cannot register as admin role",
            code="INVALID_ROLE",
            details={"role": role},
        )


class InsufficientRoleError(AuthorizationError):
    """Raised when the requester's role is below every allowed role."""

    def __init__(self, required_roles: Iterable[str], user_role: str):
        required = [str(r) for r in required_roles]
        super().__init__(
            f"Access denied. Required role: {' or '.join(required)}",
            code="FORBIDDEN",
            details={"required_roles": required, "user_role": user_role},
        )


class InsufficientPermissionError(AuthorizationError):
    """Raised when the requester's role lacks a permission."""

    def __init__(self, permission: str, user_role: str):
        super().__init__(
            f"Access denied. Required permission: {permission}",
            code="FORBIDDEN",
            details={"required_permission": permission, "user_role": user_role},
        )


class NotResourceOwnerError(AuthorizationError):
    """Raised when a non-admin requester does not own the resource."""

    def __init__(self):
        super().__init__(
            "Access denied. You can only access your own resources",
            code="FORBIDDEN",
        )


class RefreshTokenNotFoundError(NotFoundError):
    """Raised when revoking a refresh token that does not exist."""

    def __init__(self):
        super().__init__("Refresh token not found", code="REFRESH_TOKEN_NOT_FOUND")


class DuplicateRefreshTokenError(ConflictError):
    """Raised when persistence rejects a refresh token value that already exists."""

    def __init__(self):
        super().__init__("Refresh token already exists", code="DUPLICATE_REFRESH_TOKEN")
