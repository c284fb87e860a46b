"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
in-memory stand-ins for the Supabase repositories, a controllable clock and
ready-made token and auth services wired to them.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from api.dependencies import reset_container
from modules.auth.exceptions import DuplicateRefreshTokenError
from modules.auth.models import NewRefreshToken, RefreshTokenRecord
from modules.auth.passwords import BcryptPasswordHasher
from modules.auth.service import AuthService
from modules.auth.tokens import TokenService
from modules.users.exceptions import EmailAlreadyExistsError
from modules.users.models import NewUser, UserRecord, UserRole
from shared.config import Settings, get_settings

# Test JWT secret (only for testing, long enough to pass validation)
TEST_JWT_SECRET = "test-secret-key-for-testing-only-0123456789"

# Low cost factor keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


def make_settings(**overrides) -> Settings:
    """Build settings isolated from the developer's .env file."""
    values = {
        "jwt_secret": TEST_JWT_SECRET,
        "jwt_access_expire": "15m",
        "jwt_refresh_expire": "7d",
        "bcrypt_rounds": TEST_BCRYPT_ROUNDS,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class InMemoryUserRepository:
    """IUserRepository backed by a dict, with the same uniqueness rules as the table."""

    def __init__(self):
        self.rows: dict[str, UserRecord] = {}

    def get_by_id(self, user_id: str, include_deleted: bool = False) -> Optional[UserRecord]:
        user = self.rows.get(user_id)
        if user is None or (user.is_deleted and not include_deleted):
            return None
        return user

    def get_by_email(self, email: str, include_deleted: bool = False) -> Optional[UserRecord]:
        email = email.strip().lower()
        for user in self.rows.values():
            if user.email == email and (include_deleted or not user.is_deleted):
                return user
        return None

    def create(self, user: NewUser) -> UserRecord:
        if self.get_by_email(user.email, include_deleted=True):
            raise EmailAlreadyExistsError()
        now = datetime.now(timezone.utc)
        record = UserRecord(
            id=str(uuid.uuid4()),
            name=user.name,
            email=user.email.strip().lower(),
            password_hash=user.password_hash,
            institution=user.institution,
            role=user.role,
            created_at=now,
            updated_at=now,
        )
        self.rows[record.id] = record
        return record

    def update_password(self, user_id: str, password_hash: str) -> None:
        self.rows[user_id] = self.rows[user_id].model_copy(update={"password_hash": password_hash})

    def soft_delete(self, user_id: str) -> Optional[UserRecord]:
        if user_id not in self.rows:
            return None
        self.rows[user_id] = self.rows[user_id].model_copy(
            update={"is_deleted": True, "deleted_at": datetime.now(timezone.utc)}
        )
        return self.rows[user_id]

    def restore(self, user_id: str) -> Optional[UserRecord]:
        if user_id not in self.rows:
            return None
        self.rows[user_id] = self.rows[user_id].model_copy(
            update={"is_deleted": False, "deleted_at": None}
        )
        return self.rows[user_id]

    def add(self, **fields) -> UserRecord:
        """Insert a record directly, bypassing the service."""
        record = UserRecord(id=fields.pop("id", str(uuid.uuid4())), **fields)
        self.rows[record.id] = record
        return record


class InMemoryRefreshTokenRepository:
    """IRefreshTokenRepository backed by a dict keyed by row id."""

    def __init__(self):
        self.rows: dict[str, RefreshTokenRecord] = {}

    def create(self, token: NewRefreshToken) -> RefreshTokenRecord:
        if any(r.token_hash == token.token_hash for r in self.rows.values()):
            raise DuplicateRefreshTokenError()
        record = RefreshTokenRecord(
            id=str(uuid.uuid4()),
            user_id=token.user_id,
            token_hash=token.token_hash,
            expires_at=token.expires_at,
            user_agent=token.user_agent,
            ip_address=token.ip_address,
            created_at=datetime.now(timezone.utc),
        )
        self.rows[record.id] = record
        return record

    def get_by_token_hash(self, token_hash: str) -> Optional[RefreshTokenRecord]:
        for record in self.rows.values():
            if record.token_hash == token_hash:
                return record
        return None

    def touch(self, token_id: str, used_at: datetime) -> None:
        self.rows[token_id] = self.rows[token_id].model_copy(update={"last_used_at": used_at})

    def revoke(self, token_id: str) -> None:
        self.rows[token_id] = self.rows[token_id].model_copy(update={"is_revoked": True})

    def revoke_all_for_user(self, user_id: str) -> int:
        active = [r for r in self.rows.values() if r.user_id == user_id and not r.is_revoked]
        for record in active:
            self.revoke(record.id)
        return len(active)

    def delete_expired(self, now: datetime) -> int:
        expired = [r.id for r in self.rows.values() if r.expires_at < now]
        for token_id in expired:
            del self.rows[token_id]
        return len(expired)

    def for_user(self, user_id: str) -> list[RefreshTokenRecord]:
        return [r for r in self.rows.values() if r.user_id == user_id]


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the service container and settings cache around each test."""
    reset_container()
    get_settings.cache_clear()
    yield
    reset_container()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def settings_factory():
    """Build settings with overrides, e.g. ``settings_factory(jwt_secret="")``."""
    return make_settings


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def token_repo() -> InMemoryRefreshTokenRepository:
    return InMemoryRefreshTokenRepository()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def token_service(settings, token_repo, clock) -> TokenService:
    return TokenService(settings, token_repo, clock=clock)


@pytest.fixture
def auth_service(user_repo, token_service, hasher) -> AuthService:
    return AuthService(users=user_repo, tokens=token_service, hasher=hasher)


@pytest.fixture
def make_user(user_repo, hasher):
    """Factory fixture creating a stored user with a real password hash."""

    async def _make_user(
        email: str = "student@ecolearn.org",
        password: str = "Secr3t!pass",
        role: UserRole = UserRole.STUDENT,
        name: str = "Test User",
        is_deleted: bool = False,
    ) -> UserRecord:
        return user_repo.add(
            name=name,
            email=email,
            password_hash=await hasher.hash(password),
            role=role,
            is_deleted=is_deleted,
        )

    return _make_user
