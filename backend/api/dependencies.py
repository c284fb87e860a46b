"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Tests swap implementations either through ``app.dependency_overrides``
or by calling ``reset_container()`` between cases.
"""

from typing import TYPE_CHECKING

from shared.config import get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import (
        IAuthService,
        IPasswordHasher,
        IRefreshTokenRepository,
    )
    from modules.auth.rbac import AccessPolicy
    from modules.auth.tokens import TokenService
    from modules.users.interfaces import IUserRepository


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._user_repository: "IUserRepository | None" = None
        self._refresh_token_repository: "IRefreshTokenRepository | None" = None
        self._password_hasher: "IPasswordHasher | None" = None
        self._token_service: "TokenService | None" = None
        self._auth_service: "IAuthService | None" = None
        self._access_policy: "AccessPolicy | None" = None

    @property
    def users(self) -> "IUserRepository":
        """Get the user repository instance."""
        if self._user_repository is None:
            from modules.users.repository import UserRepository
            from shared.database import get_supabase_client
            self._user_repository = UserRepository(get_supabase_client())
        return self._user_repository

    @property
    def refresh_tokens(self) -> "IRefreshTokenRepository":
        """Get the refresh token repository instance."""
        if self._refresh_token_repository is None:
            from modules.auth.repository import RefreshTokenRepository
            from shared.database import get_supabase_client
            self._refresh_token_repository = RefreshTokenRepository(get_supabase_client())
        return self._refresh_token_repository

    @property
    def password_hasher(self) -> "IPasswordHasher":
        """Get the password hasher instance."""
        if self._password_hasher is None:
            from modules.auth.passwords import BcryptPasswordHasher
            self._password_hasher = BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)
        return self._password_hasher

    @property
    def tokens(self) -> "TokenService":
        """
        Get the token service instance.

        Raises:
            ConfigurationError: If the signing secret is missing or too short
        """
        if self._token_service is None:
            from modules.auth.tokens import TokenService
            self._token_service = TokenService(get_settings(), self.refresh_tokens)
        return self._token_service

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                users=self.users,
                tokens=self.tokens,
                hasher=self.password_hasher,
                rotate_refresh_tokens=get_settings().refresh_token_rotation,
            )
        return self._auth_service

    @property
    def access_policy(self) -> "AccessPolicy":
        """Get the role and permission tables used by authorization guards."""
        if self._access_policy is None:
            from modules.auth.rbac import DEFAULT_ACCESS_POLICY
            self._access_policy = DEFAULT_ACCESS_POLICY
        return self._access_policy

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._user_repository = None
        self._refresh_token_repository = None
        self._password_hasher = None
        self._token_service = None
        self._auth_service = None
        self._access_policy = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_user_repository() -> "IUserRepository":
    """FastAPI dependency for the user repository."""
    return get_container().users


def get_token_service() -> "TokenService":
    """FastAPI dependency for the token service."""
    return get_container().tokens


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_access_policy() -> "AccessPolicy":
    """FastAPI dependency for the authorization tables."""
    return get_container().access_policy
