"""
Authentication module data models.

These models define token claims, refresh-token records, the request bodies
accepted by the auth endpoints and the payloads they return. Wire models use
camelCase aliases (``accessToken``, ``refreshTokenExpiresAt``).
"""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from modules.users.models import PublicUser, UserRole

PASSWORD_MIN_LENGTH = 8
# bcrypt ignores (newer releases reject) input beyond 72 bytes
PASSWORD_MAX_BYTES = 72
PASSWORD_SPECIAL_CHARACTERS = "@$!%*?&"

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"\d"), "a number"),
    (re.compile(f"[{re.escape(PASSWORD_SPECIAL_CHARACTERS)}]"), "a special character (@$!%*?&)"),
)


def check_password_strength(password: str) -> str:
    """Validate the password policy, returning the password unchanged."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(password)]
    if missing:
        raise ValueError(f"Password must contain {', '.join(missing)}")
    return password


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Tokens
# -----------------------------------------------------------------------------


class TokenUser(BaseModel):
    """Identity embedded in an access token under the ``user`` claim."""

    id: str
    email: str
    role: str


class AccessTokenClaims(BaseModel):
    """Decoded access token payload."""

    user: TokenUser
    iss: str = Field(..., description="Issuer tag")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")

    model_config = ConfigDict(extra="ignore")


class DeviceInfo(BaseModel):
    """Client details recorded with each refresh token."""

    user_agent: Optional[str] = None
    ip: Optional[str] = None


class RefreshTokenRecord(BaseModel):
    """
    Persisted refresh token.

    Only the SHA-256 digest of the token is stored; the plaintext is handed
    to the client once and never kept.
    """

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    is_revoked: bool = False
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None


class NewRefreshToken(BaseModel):
    """Data needed to insert a refresh token row."""

    user_id: str
    token_hash: str
    expires_at: datetime
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class IssuedRefreshToken(BaseModel):
    """A freshly generated refresh token and its expiry."""

    token: str
    expires_at: datetime


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class RegisterRequest(_CamelModel):
    """Request to create an account."""

    name: str = Field(..., min_length=2, max_length=100, description="Display name")
    email: EmailStr = Field(..., max_length=255, description="Email address")
    password: str = Field(..., description="Plaintext password")
    institution: Optional[str] = Field(None, max_length=200, description="Institution")
    role: Optional[UserRole] = Field(None, description="Requested role (default Student)")

    @field_validator("name", "institution", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(_CamelModel):
    """Request to log in with email and password."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RefreshRequest(_CamelModel):
    """Request to exchange a refresh token for a new access token."""

    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(_CamelModel):
    """Logout body; without a refresh token logout is a client-side no-op."""

    refresh_token: Optional[str] = None


class ChangePasswordRequest(_CamelModel):
    """Request to change the current user's password."""

    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_strength(value)

    @model_validator(mode="after")
    def _must_differ(self) -> "ChangePasswordRequest":
        if self.new_password == self.current_password:
            raise ValueError("New password must be different from current password")
        return self


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------


class AuthSession(_CamelModel):
    """Result of a successful register or login."""

    user: PublicUser
    access_token: str
    refresh_token: str
    refresh_token_expires_at: datetime


class SessionUser(_CamelModel):
    """Minimal identity returned by the refresh endpoint."""

    id: str
    email: str
    name: str
    role: UserRole


class RefreshResult(_CamelModel):
    """Result of a successful refresh. Refresh fields are set only when rotating."""

    access_token: str
    user: SessionUser
    refresh_token: Optional[str] = None
    refresh_token_expires_at: Optional[datetime] = None


class AuthSessionResponse(BaseModel):
    success: bool = True
    data: AuthSession


class RefreshResponse(BaseModel):
    success: bool = True
    data: RefreshResult


class MessageResponse(BaseModel):
    success: bool = True
    message: str
