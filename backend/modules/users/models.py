"""
Users module data models.

The user record is the credential store consumed by the auth module.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    """Platform roles, lowest privilege first."""

    STUDENT = "Student"
    TEACHER = "Teacher"
    ADMIN = "Admin"
    SUPER_ADMIN = "SuperAdmin"


# Roles that can only be granted by an administrator, never self-assigned
PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class UserRecord(BaseModel):
    """
    Full user row, including the password hash.

    Never returned from an endpoint; convert with ``to_public()`` first.
    """

    id: str
    name: str
    email: str
    password_hash: str
    institution: Optional[str] = None
    profile_picture: Optional[str] = None
    role: UserRole = UserRole.STUDENT
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public(self) -> "PublicUser":
        return PublicUser(
            id=self.id,
            name=self.name,
            email=self.email,
            institution=self.institution,
            profile_picture=self.profile_picture,
            role=self.role,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class PublicUser(BaseModel):
    """Sanitized user profile safe to send to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address (lowercase)")
    institution: Optional[str] = Field(None, description="Institution name")
    profile_picture: Optional[str] = Field(None, description="Profile picture URL")
    role: UserRole = Field(..., description="Platform role")
    created_at: Optional[datetime] = Field(None, description="Account creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")


class NewUser(BaseModel):
    """Data needed to insert a user row."""

    name: str
    email: str
    password_hash: str
    institution: Optional[str] = None
    role: UserRole = UserRole.STUDENT
