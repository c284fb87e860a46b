"""
Users module.

Credential store for the platform: user records, roles and soft deletion.

Public API:
- IUserRepository: Interface for user storage
- UserRecord / PublicUser / NewUser: Data models
- UserRole: Platform roles
"""

from .interfaces import IUserRepository
from .models import NewUser, PublicUser, UserRecord, UserRole, PRIVILEGED_ROLES
from .exceptions import EmailAlreadyExistsError, UserNotFoundError

__all__ = [
    # Interface
    "IUserRepository",
    # Models
    "NewUser",
    "PublicUser",
    "UserRecord",
    "UserRole",
    "PRIVILEGED_ROLES",
    # Exceptions
    "EmailAlreadyExistsError",
    "UserNotFoundError",
]
