"""
Access and refresh token handling.

Access tokens are short-lived HS256 JWTs carrying ``{"user": {id, email, role}}``
plus issuer and expiry. Refresh tokens are opaque random strings; only their
SHA-256 digest is persisted, together with expiry, revocation and device data.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, parse_duration, validate_security_settings
from shared.logging import mask_token
from modules.users.models import UserRole

from .exceptions import (
    ExpiredTokenError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    RefreshTokenNotFoundError,
    RevokedTokenError,
)
from .interfaces import IRefreshTokenRepository
from .models import (
    AccessTokenClaims,
    DeviceInfo,
    IssuedRefreshToken,
    NewRefreshToken,
    RefreshTokenRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_ACCESS_TOKEN_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TOKEN_TTL = timedelta(days=7)
REFRESH_TOKEN_BYTES = 40


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies access and refresh tokens.

    Construction fails with ConfigurationError when the signing secret is
    missing or too short, so a misconfigured process never gets as far as
    serving a request.
    """

    def __init__(
        self,
        settings: Settings,
        refresh_tokens: IRefreshTokenRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        validate_security_settings(settings)

        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._issuer = settings.jwt_issuer
        self._access_ttl = parse_duration(settings.jwt_access_expire, DEFAULT_ACCESS_TOKEN_TTL)
        self._refresh_ttl = parse_duration(settings.jwt_refresh_expire, DEFAULT_REFRESH_TOKEN_TTL)
        self._refresh_tokens = refresh_tokens
        self._clock = clock

    @property
    def access_token_ttl(self) -> timedelta:
        return self._access_ttl

    @property
    def refresh_token_ttl(self) -> timedelta:
        return self._refresh_ttl

    # -------------------------------------------------------------------------
    # Access tokens
    # -------------------------------------------------------------------------

    def generate_access_token(
        self,
        user_id: str,
        email: str,
        role: Union[UserRole, str],
    ) -> str:
        """
        Create a signed access token.

        Args:
            user_id: User ID
            email: User email
            role: User role

        Returns:
            JWT string whose ``user`` claim reproduces the arguments
        """
        now = self._clock()
        expires = now + self._access_ttl

        payload = {
            "user": {
                "id": str(user_id),
                "email": email,
                "role": UserRole(role).value,
            },
            "iss": self._issuer,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
        }

        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """
        Decode and verify an access token.

        Raises:
            ExpiredTokenError: If the token's expiry has passed
            InvalidTokenError: Bad signature, wrong issuer or malformed payload
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError("Access token expired")
        except jwt.InvalidTokenError:
            raise InvalidTokenError()

        try:
            return AccessTokenClaims.model_validate(payload)
        except PydanticValidationError:
            raise InvalidTokenError("Invalid token payload")

    # -------------------------------------------------------------------------
    # Refresh tokens
    # -------------------------------------------------------------------------

    @staticmethod
    def hash_refresh_token(token: str) -> str:
        """Digest under which a refresh token is stored and looked up."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    async def generate_refresh_token(
        self,
        user_id: str,
        device: Optional[DeviceInfo] = None,
    ) -> IssuedRefreshToken:
        """
        Create and persist a new refresh token.

        The plaintext value is returned here and nowhere else.
        """
        device = device or DeviceInfo()
        token = secrets.token_hex(REFRESH_TOKEN_BYTES)
        expires_at = self._clock() + self._refresh_ttl

        record = self._refresh_tokens.create(
            NewRefreshToken(
                user_id=str(user_id),
                token_hash=self.hash_refresh_token(token),
                expires_at=expires_at,
                user_agent=device.user_agent,
                ip_address=device.ip,
            )
        )

        logger.info(
            f"Refresh token generated (user_id={user_id}, "
            f"expires_at={record.expires_at.isoformat()}, ip={device.ip})"
        )

        return IssuedRefreshToken(token=token, expires_at=record.expires_at)

    async def verify_refresh_token(self, token: str) -> RefreshTokenRecord:
        """
        Validate a refresh token and record its use.

        Checks run in order: existence, revocation, expiry.

        Raises:
            InvalidRefreshTokenError: No record matches the token
            RevokedTokenError: The token was revoked
            ExpiredTokenError: The token is past its expiry
        """
        record = self._refresh_tokens.get_by_token_hash(self.hash_refresh_token(token))

        if record is None:
            raise InvalidRefreshTokenError()

        if record.is_revoked:
            # A revoked token coming back is a sign it was stolen
            logger.warning(
                f"Attempted to use revoked refresh token "
                f"(user_id={record.user_id}, token={mask_token(token)})"
            )
            raise RevokedTokenError()

        now = self._clock()
        if record.expires_at < now:
            raise ExpiredTokenError("Refresh token expired")

        self._refresh_tokens.touch(record.id, now)
        return record.model_copy(update={"last_used_at": now})

    async def revoke_refresh_token(self, token: str) -> None:
        """
        Revoke a single refresh token. Revoking twice is a no-op.

        Raises:
            RefreshTokenNotFoundError: If the token does not exist
        """
        record = self._refresh_tokens.get_by_token_hash(self.hash_refresh_token(token))

        if record is None:
            raise RefreshTokenNotFoundError()

        if record.is_revoked:
            logger.debug(f"Refresh token already revoked (user_id={record.user_id})")
            return

        self._refresh_tokens.revoke(record.id)
        logger.info(f"Refresh token revoked (user_id={record.user_id})")

    async def revoke_all_user_tokens(self, user_id: str) -> int:
        """Revoke every active refresh token of a user. Returns how many were revoked."""
        count = self._refresh_tokens.revoke_all_for_user(str(user_id))
        logger.info(f"All refresh tokens revoked for user (user_id={user_id}, count={count})")
        return count

    async def replace_refresh_token(
        self,
        record: RefreshTokenRecord,
        device: Optional[DeviceInfo] = None,
    ) -> IssuedRefreshToken:
        """Issue a successor for an already verified token and revoke the original."""
        issued = await self.generate_refresh_token(record.user_id, device)
        self._refresh_tokens.revoke(record.id)
        logger.info(f"Refresh token rotated (user_id={record.user_id})")
        return issued

    async def rotate_refresh_token(
        self,
        old_token: str,
        device: Optional[DeviceInfo] = None,
    ) -> IssuedRefreshToken:
        """Verify ``old_token``, issue a new one for the same user and revoke the old one."""
        record = await self.verify_refresh_token(old_token)
        return await self.replace_refresh_token(record, device)

    async def cleanup_expired_tokens(self) -> int:
        """Delete refresh tokens past their expiry. Returns how many were deleted."""
        count = self._refresh_tokens.delete_expired(self._clock())
        logger.info(f"Expired refresh tokens cleaned up (count={count})")
        return count
