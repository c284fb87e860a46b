"""
Session lifecycle service.

Orchestrates register, login, refresh, logout and password change on top of
the token service, the password hasher and the user repository.
"""

import logging
from typing import Optional

from modules.users.exceptions import EmailAlreadyExistsError, UserNotFoundError
from modules.users.interfaces import IUserRepository
from modules.users.models import NewUser, PRIVILEGED_ROLES, UserRecord, UserRole

from .exceptions import (
    AccountDeletedError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidPasswordError,
    RoleNotAllowedError,
)
from .interfaces import IAuthService, IPasswordHasher
from .models import (
    AuthSession,
    DeviceInfo,
    RefreshResult,
    RegisterRequest,
    SessionUser,
)
from .tokens import TokenService

logger = logging.getLogger(__name__)

# Hashed once and compared against when the email is unknown
_DUMMY_PASSWORD = "EcoLearn-timing-equalizer-1!"


class AuthService(IAuthService):
    """
    Implementation of the session lifecycle.

    Password verification always happens before any token is issued.
    Password changes revoke every refresh token of the user.
    """

    def __init__(
        self,
        users: IUserRepository,
        tokens: TokenService,
        hasher: IPasswordHasher,
        rotate_refresh_tokens: bool = False,
    ):
        self._users = users
        self._tokens = tokens
        self._hasher = hasher
        self._rotate_refresh_tokens = rotate_refresh_tokens
        self._dummy_hash: Optional[str] = None

    async def register(
        self, request: RegisterRequest, device: DeviceInfo
    ) -> AuthSession:
        role = request.role or UserRole.STUDENT
        if role in PRIVILEGED_ROLES:
            logger.warning(
                f"Registration attempted with privileged role "
                f"(email={request.email}, role={role.value}, ip={device.ip})"
            )
            raise RoleNotAllowedError(role.value)

        # Soft-deleted accounts still own their email
        if self._users.get_by_email(request.email, include_deleted=True):
            logger.info(f"Registration rejected, email in use (email={request.email})")
            raise EmailAlreadyExistsError()

        password_hash = await self._hasher.hash(request.password)
        user = self._users.create(
            NewUser(
                name=request.name,
                email=request.email,
                password_hash=password_hash,
                institution=request.institution,
                role=role,
            )
        )

        logger.info(f"User registered (user_id={user.id}, email={user.email}, role={user.role.value})")
        return await self._open_session(user, device)

    async def login(
        self, email: str, password: str, device: DeviceInfo
    ) -> AuthSession:
        email = email.strip().lower()
        user = self._users.get_by_email(email, include_deleted=True)

        if user is None:
            await self._hasher.verify(password, await self._get_dummy_hash())
            logger.warning(f"Login failed: unknown email (email={email}, ip={device.ip})")
            raise InvalidCredentialsError()

        if not await self._hasher.verify(password, user.password_hash):
            logger.warning(
                f"Login failed: wrong password (user_id={user.id}, email={email}, ip={device.ip})"
            )
            raise InvalidCredentialsError()

        if user.is_deleted:
            logger.warning(f"Login to deleted account (user_id={user.id}, ip={device.ip})")
            raise AccountDeletedError()

        logger.info(f"User logged in (user_id={user.id}, email={email}, ip={device.ip})")
        return await self._open_session(user, device)

    async def refresh_access_token(
        self, refresh_token: str, device: DeviceInfo
    ) -> RefreshResult:
        record = await self._tokens.verify_refresh_token(refresh_token)

        user = self._users.get_by_id(record.user_id, include_deleted=True)
        if user is None:
            logger.warning(f"Refresh token owner missing (user_id={record.user_id}, ip={device.ip})")
            raise AccountNotFoundError()
        if user.is_deleted:
            logger.warning(f"Refresh for deleted account (user_id={user.id}, ip={device.ip})")
            raise AccountDeletedError()

        access_token = self._tokens.generate_access_token(user.id, user.email, user.role)
        result = RefreshResult(
            access_token=access_token,
            user=SessionUser(id=user.id, email=user.email, name=user.name, role=user.role),
        )

        if self._rotate_refresh_tokens:
            issued = await self._tokens.replace_refresh_token(record, device)
            result.refresh_token = issued.token
            result.refresh_token_expires_at = issued.expires_at

        logger.info(f"Access token refreshed (user_id={user.id}, ip={device.ip})")
        return result

    async def logout(self, refresh_token: str) -> None:
        await self._tokens.revoke_refresh_token(refresh_token)

    async def logout_all_devices(self, user_id: str) -> int:
        count = await self._tokens.revoke_all_user_tokens(user_id)
        logger.info(f"User logged out from all devices (user_id={user_id}, sessions={count})")
        return count

    async def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> None:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        if not await self._hasher.verify(current_password, user.password_hash):
            logger.warning(f"Password change with wrong current password (user_id={user_id})")
            raise InvalidPasswordError()

        self._users.update_password(user_id, await self._hasher.hash(new_password))
        await self._tokens.revoke_all_user_tokens(user_id)

        logger.info(f"Password changed, all sessions revoked (user_id={user_id})")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _open_session(self, user: UserRecord, device: DeviceInfo) -> AuthSession:
        access_token = self._tokens.generate_access_token(user.id, user.email, user.role)
        issued = await self._tokens.generate_refresh_token(user.id, device)

        return AuthSession(
            user=user.to_public(),
            access_token=access_token,
            refresh_token=issued.token,
            refresh_token_expires_at=issued.expires_at,
        )

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self._hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash
