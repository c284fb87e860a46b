"""
Authentication module interfaces.

Other modules and the API layer depend on these protocols, not on the
concrete implementations. This keeps the lifecycle flows testable with
in-memory stores and lets the hashing algorithm change without touching
the service.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from .models import (
    AuthSession,
    DeviceInfo,
    NewRefreshToken,
    RefreshResult,
    RefreshTokenRecord,
    RegisterRequest,
)


@runtime_checkable
class IPasswordHasher(Protocol):
    """Adaptive password hashing capability."""

    async def hash(self, password: str) -> str:
        """Hash a plaintext password."""
        ...

    async def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash."""
        ...


@runtime_checkable
class IRefreshTokenRepository(Protocol):
    """
    Interface for refresh token persistence.

    Implementations must enforce uniqueness of ``token_hash`` at the storage
    level and raise DuplicateRefreshTokenError on conflict.
    """

    def create(self, token: NewRefreshToken) -> RefreshTokenRecord:
        ...

    def get_by_token_hash(self, token_hash: str) -> Optional[RefreshTokenRecord]:
        ...

    def touch(self, token_id: str, used_at: datetime) -> None:
        """Record that a token was just used."""
        ...

    def revoke(self, token_id: str) -> None:
        ...

    def revoke_all_for_user(self, user_id: str) -> int:
        """Revoke every active token for a user in one update. Returns the count."""
        ...

    def delete_expired(self, now: datetime) -> int:
        """Delete tokens whose expiry is before ``now``. Returns the count."""
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for session lifecycle operations.

    This protocol defines the contract that the auth module exposes
    to the API layer.
    """

    async def register(
        self, request: RegisterRequest, device: DeviceInfo
    ) -> AuthSession:
        """
        Create an account and open a session.

        Raises:
            RoleNotAllowedError: If Admin or SuperAdmin was requested
            EmailAlreadyExistsError: If the email is taken
        """
        ...

    async def login(
        self, email: str, password: str, device: DeviceInfo
    ) -> AuthSession:
        """
        Authenticate with email and password.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountDeletedError: Correct password on a soft-deleted account
        """
        ...

    async def refresh_access_token(
        self, refresh_token: str, device: DeviceInfo
    ) -> RefreshResult:
        """
        Issue a new access token for a valid refresh token.

        Raises:
            InvalidRefreshTokenError, RevokedTokenError, ExpiredTokenError
            AccountNotFoundError / AccountDeletedError: If the owner is gone
        """
        ...

    async def logout(self, refresh_token: str) -> None:
        """Revoke one refresh token."""
        ...

    async def logout_all_devices(self, user_id: str) -> int:
        """Revoke every refresh token of a user."""
        ...

    async def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> None:
        """
        Change a password and revoke every session of the user.

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidPasswordError: If ``current_password`` does not match
        """
        ...
