"""
Refresh token repository for database access.

Encapsulates all Supabase queries and data mapping for the
``refresh_tokens`` table.
"""

from datetime import datetime
from typing import Optional, Any

from postgrest.exceptions import APIError

from shared.repository import BaseRepository
from .exceptions import DuplicateRefreshTokenError
from .models import NewRefreshToken, RefreshTokenRecord

REFRESH_TOKENS_TABLE = "refresh_tokens"


class RefreshTokenRepository(BaseRepository[RefreshTokenRecord]):
    """
    Repository for refresh token data access.

    Every mutation is a single statement: revoking all of a user's tokens
    is one UPDATE filtered on ``user_id`` and ``is_revoked``.
    """

    def create(self, token: NewRefreshToken) -> RefreshTokenRecord:
        data = {
            "user_id": token.user_id,
            "token_hash": token.token_hash,
            "expires_at": self._to_db_timestamp(token.expires_at),
            "is_revoked": False,
            "user_agent": token.user_agent,
            "ip_address": token.ip_address,
        }
        try:
            result = self._db.table(REFRESH_TOKENS_TABLE).insert(data).execute()
        except APIError as e:
            if self._is_unique_violation(e):
                raise DuplicateRefreshTokenError() from e
            raise

        return self._map_to_record(result.data[0])

    def get_by_token_hash(self, token_hash: str) -> Optional[RefreshTokenRecord]:
        result = (
            self._db.table(REFRESH_TOKENS_TABLE)
            .select("*")
            .eq("token_hash", token_hash)
            .execute()
        )
        row = self._first(result.data)
        return self._map_to_record(row) if row else None

    def touch(self, token_id: str, used_at: datetime) -> None:
        (
            self._db.table(REFRESH_TOKENS_TABLE)
            .update({"last_used_at": self._to_db_timestamp(used_at)})
            .eq("id", token_id)
            .execute()
        )

    def revoke(self, token_id: str) -> None:
        (
            self._db.table(REFRESH_TOKENS_TABLE)
            .update({"is_revoked": True})
            .eq("id", token_id)
            .execute()
        )

    def revoke_all_for_user(self, user_id: str) -> int:
        result = (
            self._db.table(REFRESH_TOKENS_TABLE)
            .update({"is_revoked": True})
            .eq("user_id", user_id)
            .eq("is_revoked", False)
            .execute()
        )
        return len(result.data or [])

    def delete_expired(self, now: datetime) -> int:
        result = (
            self._db.table(REFRESH_TOKENS_TABLE)
            .delete()
            .lt("expires_at", self._to_db_timestamp(now))
            .execute()
        )
        return len(result.data or [])

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_record(self, data: dict[str, Any]) -> RefreshTokenRecord:
        """Map database row to RefreshTokenRecord model."""
        return RefreshTokenRecord(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            token_hash=data["token_hash"],
            expires_at=data["expires_at"],
            is_revoked=bool(data.get("is_revoked", False)),
            user_agent=data.get("user_agent"),
            ip_address=data.get("ip_address"),
            created_at=data.get("created_at"),
            last_used_at=data.get("last_used_at"),
        )
