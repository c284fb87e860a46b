"""
User repository for database access.

Encapsulates all Supabase queries and data mapping for the ``users`` table.
"""

from datetime import datetime, timezone
from typing import Optional, Any

from postgrest.exceptions import APIError

from shared.repository import BaseRepository
from .exceptions import EmailAlreadyExistsError
from .models import NewUser, UserRecord, UserRole

USERS_TABLE = "users"


class UserRepository(BaseRepository[UserRecord]):
    """
    Repository for user data access.

    Soft-delete filtering is an explicit ``include_deleted`` parameter on
    each read; nothing rewrites queries behind the caller's back.

    Note: This repository does NOT perform authorization checks.
    """

    def get_by_id(
        self, user_id: str, include_deleted: bool = False
    ) -> Optional[UserRecord]:
        query = self._db.table(USERS_TABLE).select("*").eq("id", user_id)
        if not include_deleted:
            query = query.eq("is_deleted", False)

        row = self._first(query.execute().data)
        return self._map_to_user(row) if row else None

    def get_by_email(
        self, email: str, include_deleted: bool = False
    ) -> Optional[UserRecord]:
        query = self._db.table(USERS_TABLE).select("*").eq("email", email.strip().lower())
        if not include_deleted:
            query = query.eq("is_deleted", False)

        row = self._first(query.execute().data)
        return self._map_to_user(row) if row else None

    def create(self, user: NewUser) -> UserRecord:
        """
        Insert a new user row.

        The ``users.email`` UNIQUE constraint is the final arbiter when two
        registrations race past the service-level existence check.
        """
        data = {
            "name": user.name,
            "email": user.email.strip().lower(),
            "password_hash": user.password_hash,
            "institution": user.institution,
            "role": user.role.value,
        }
        try:
            result = self._db.table(USERS_TABLE).insert(data).execute()
        except APIError as e:
            if self._is_unique_violation(e):
                raise EmailAlreadyExistsError() from e
            raise

        return self._map_to_user(result.data[0])

    def update_password(self, user_id: str, password_hash: str) -> None:
        data = {
            "password_hash": password_hash,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        self._db.table(USERS_TABLE).update(data).eq("id", user_id).execute()

    def soft_delete(self, user_id: str) -> Optional[UserRecord]:
        now = datetime.now(timezone.utc).isoformat()
        result = (
            self._db.table(USERS_TABLE)
            .update({"is_deleted": True, "deleted_at": now, "updated_at": now})
            .eq("id", user_id)
            .execute()
        )
        row = self._first(result.data)
        return self._map_to_user(row) if row else None

    def restore(self, user_id: str) -> Optional[UserRecord]:
        result = (
            self._db.table(USERS_TABLE)
            .update({
                "is_deleted": False,
                "deleted_at": None,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })
            .eq("id", user_id)
            .execute()
        )
        row = self._first(result.data)
        return self._map_to_user(row) if row else None

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_user(self, data: dict[str, Any]) -> UserRecord:
        """Map database row to UserRecord model."""
        return UserRecord(
            id=str(data["id"]),
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            institution=data.get("institution"),
            profile_picture=data.get("profile_picture"),
            role=UserRole(data.get("role") or UserRole.STUDENT.value),
            is_deleted=bool(data.get("is_deleted", False)),
            deleted_at=data.get("deleted_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
