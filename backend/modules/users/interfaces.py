"""
Users module interface.

The auth module depends on IUserRepository, not on the Supabase
implementation, so the lifecycle flows can be tested with an in-memory store.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import NewUser, UserRecord


@runtime_checkable
class IUserRepository(Protocol):
    """
    Interface for user record storage.

    Soft-deleted users are excluded from reads unless ``include_deleted``
    is passed explicitly.
    """

    def get_by_id(
        self, user_id: str, include_deleted: bool = False
    ) -> Optional[UserRecord]:
        """Get a user by ID, or None."""
        ...

    def get_by_email(
        self, email: str, include_deleted: bool = False
    ) -> Optional[UserRecord]:
        """Get a user by email (case-insensitive), or None."""
        ...

    def create(self, user: NewUser) -> UserRecord:
        """
        Insert a new user.

        Raises:
            EmailAlreadyExistsError: If the email is already taken
        """
        ...

    def update_password(self, user_id: str, password_hash: str) -> None:
        """Replace a user's password hash."""
        ...

    def soft_delete(self, user_id: str) -> Optional[UserRecord]:
        """Mark a user as deleted. Returns the updated record or None."""
        ...

    def restore(self, user_id: str) -> Optional[UserRecord]:
        """Clear the deleted flag. Returns the updated record or None."""
        ...
