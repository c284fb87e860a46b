"""
Role-based access control.

The role hierarchy and the permission table live in an immutable
``AccessPolicy`` built once at import time. Guards receive it through the
``get_access_policy`` dependency, so tests can override it with a different
table without touching module state.

Guard usage:

    @router.delete("/{user_id}")
    async def delete_user(user_id: str, admin: AuthenticatedUser = Depends(require_admin)):
        ...
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Union

from fastapi import Depends, Request

from api.dependencies import get_access_policy
from api.middleware.auth import get_current_user
from modules.users.models import UserRole
from shared.models import AuthenticatedUser

from .exceptions import (
    AuthenticationRequiredError,
    InsufficientPermissionError,
    InsufficientRoleError,
    NotResourceOwnerError,
)

logger = logging.getLogger(__name__)

Role = UserRole

RoleLike = Union[UserRole, str]
OwnerResolver = Callable[[Request], Union[Optional[Any], Awaitable[Optional[Any]]]]


class Permission(str, Enum):
    """Closed set of permission strings."""

    VIDEO_READ = "video:read"
    VIDEO_CREATE = "video:create"
    VIDEO_UPDATE_OWN = "video:update:own"
    VIDEO_UPDATE_ANY = "video:update:any"
    VIDEO_DELETE_OWN = "video:delete:own"
    VIDEO_DELETE_ANY = "video:delete:any"
    VIDEO_APPROVE = "video:approve"
    VIDEO_COMMENT = "video:comment"
    VIDEO_RATE = "video:rate"
    COMMENT_CREATE = "comment:create"
    COMMENT_READ = "comment:read"
    COMMENT_DELETE_OWN = "comment:delete:own"
    COMMENT_DELETE_ANY = "comment:delete:any"
    RATING_CREATE = "rating:create"
    RATING_READ = "rating:read"
    USER_READ_OWN = "user:read:own"
    USER_READ_ANY = "user:read:any"
    USER_UPDATE_OWN = "user:update:own"
    USER_UPDATE_ANY = "user:update:any"
    USER_DELETE_ANY = "user:delete:any"


def _role_name(role: RoleLike) -> str:
    return role.value if isinstance(role, Enum) else str(role)


@dataclass(frozen=True)
class AccessPolicy:
    """
    Role hierarchy and permission tables.

    Attributes:
        hierarchy: Role name to rank; higher ranks satisfy lower requirements
        permissions: Role name to the permissions it holds
        wildcard_roles: Roles granted every permission
        ownership_bypass_roles: Roles that skip ownership checks
    """

    hierarchy: Mapping[str, int]
    permissions: Mapping[str, frozenset[str]]
    wildcard_roles: frozenset[str] = field(default_factory=frozenset)
    ownership_bypass_roles: frozenset[str] = field(default_factory=frozenset)

    def rank(self, role: RoleLike) -> int:
        """Rank of a role; unknown roles rank 0."""
        return self.hierarchy.get(_role_name(role), 0)

    def satisfies_role(self, role: RoleLike, allowed_roles: Iterable[RoleLike]) -> bool:
        name = _role_name(role)
        allowed = [_role_name(r) for r in allowed_roles]
        if name in allowed:
            return True

        user_rank = self.rank(name)
        if user_rank == 0:
            return False
        # Unknown entries in the allowed list only ever match literally
        return any(
            r in self.hierarchy and user_rank >= self.hierarchy[r] for r in allowed
        )

    def has_permission(self, role: RoleLike, permission: Union[Permission, str]) -> bool:
        name = _role_name(role)
        if name in self.wildcard_roles:
            return True
        return _role_name(permission) in self.permissions.get(name, frozenset())

    def bypasses_ownership(self, role: RoleLike) -> bool:
        return _role_name(role) in self.ownership_bypass_roles


def build_default_access_policy() -> AccessPolicy:
    """Build the platform's standard role and permission tables."""
    student = {
        Permission.VIDEO_READ,
        Permission.VIDEO_COMMENT,
        Permission.VIDEO_RATE,
        Permission.COMMENT_CREATE,
        Permission.COMMENT_READ,
        Permission.COMMENT_DELETE_OWN,
        Permission.RATING_CREATE,
        Permission.RATING_READ,
        Permission.USER_READ_OWN,
        Permission.USER_UPDATE_OWN,
    }
    teacher = student | {
        Permission.VIDEO_CREATE,
        Permission.VIDEO_UPDATE_OWN,
        Permission.VIDEO_DELETE_OWN,
    }
    admin = {
        Permission.VIDEO_READ,
        Permission.VIDEO_CREATE,
        Permission.VIDEO_UPDATE_ANY,
        Permission.VIDEO_DELETE_ANY,
        Permission.VIDEO_APPROVE,
        Permission.VIDEO_COMMENT,
        Permission.VIDEO_RATE,
        Permission.COMMENT_CREATE,
        Permission.COMMENT_READ,
        Permission.COMMENT_DELETE_ANY,
        Permission.RATING_CREATE,
        Permission.RATING_READ,
        Permission.USER_READ_ANY,
        Permission.USER_UPDATE_ANY,
        Permission.USER_DELETE_ANY,
    }

    return AccessPolicy(
        hierarchy=MappingProxyType({
            UserRole.STUDENT.value: 1,
            UserRole.TEACHER.value: 2,
            UserRole.ADMIN.value: 3,
            UserRole.SUPER_ADMIN.value: 4,
        }),
        permissions=MappingProxyType({
            UserRole.STUDENT.value: frozenset(p.value for p in student),
            UserRole.TEACHER.value: frozenset(p.value for p in teacher),
            UserRole.ADMIN.value: frozenset(p.value for p in admin),
            UserRole.SUPER_ADMIN.value: frozenset(),
        }),
        wildcard_roles=frozenset({UserRole.SUPER_ADMIN.value}),
        ownership_bypass_roles=frozenset({UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value}),
    )


DEFAULT_ACCESS_POLICY = build_default_access_policy()


# -----------------------------------------------------------------------------
# Checks
# -----------------------------------------------------------------------------


def check_role(
    user: Optional[AuthenticatedUser],
    allowed_roles: Iterable[RoleLike],
    policy: AccessPolicy = DEFAULT_ACCESS_POLICY,
) -> AuthenticatedUser:
    """
    Admit a user whose role is listed or ranks at least as high as a listed role.

    Raises:
        AuthenticationRequiredError: If there is no user
        InsufficientRoleError: If the role is too low
    """
    if user is None:
        raise AuthenticationRequiredError()

    allowed = [_role_name(r) for r in allowed_roles]
    if not policy.satisfies_role(user.role, allowed):
        logger.warning(
            f"Role check failed (user_id={user.id}, role={user.role}, required={allowed})"
        )
        raise InsufficientRoleError(allowed, user.role)
    return user


def check_permission(
    user: Optional[AuthenticatedUser],
    permission: Union[Permission, str],
    policy: AccessPolicy = DEFAULT_ACCESS_POLICY,
) -> AuthenticatedUser:
    """
    Admit a user whose role holds ``permission``.

    Raises:
        AuthenticationRequiredError: If there is no user
        InsufficientPermissionError: If the role lacks the permission
    """
    if user is None:
        raise AuthenticationRequiredError()

    if not policy.has_permission(user.role, permission):
        name = _role_name(permission)
        logger.warning(
            f"Permission check failed (user_id={user.id}, role={user.role}, permission={name})"
        )
        raise InsufficientPermissionError(name, user.role)
    return user


def check_ownership(
    user: Optional[AuthenticatedUser],
    owner_id: Optional[Any],
    policy: AccessPolicy = DEFAULT_ACCESS_POLICY,
) -> AuthenticatedUser:
    """
    Admit the resource owner, or anyone whose role bypasses ownership.

    Raises:
        AuthenticationRequiredError: If there is no user
        NotResourceOwnerError: If the user does not own the resource
    """
    if user is None:
        raise AuthenticationRequiredError()

    if policy.bypasses_ownership(user.role):
        return user

    if owner_id is None or str(owner_id) != str(user.id):
        logger.warning(f"Ownership check failed (user_id={user.id}, owner_id={owner_id})")
        raise NotResourceOwnerError()
    return user


# -----------------------------------------------------------------------------
# FastAPI guards
# -----------------------------------------------------------------------------


def require_role(allowed_roles: Iterable[RoleLike]) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """Build a dependency admitting ``allowed_roles`` and every role above them."""
    allowed = [_role_name(r) for r in allowed_roles]

    async def role_guard(
        user: AuthenticatedUser = Depends(get_current_user),
        policy: AccessPolicy = Depends(get_access_policy),
    ) -> AuthenticatedUser:
        return check_role(user, allowed, policy)

    return role_guard


def require_permission(permission: Union[Permission, str]) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """Build a dependency admitting roles that hold ``permission``."""

    async def permission_guard(
        user: AuthenticatedUser = Depends(get_current_user),
        policy: AccessPolicy = Depends(get_access_policy),
    ) -> AuthenticatedUser:
        return check_permission(user, permission, policy)

    return permission_guard


def require_ownership_or_admin(
    resolve_owner_id: OwnerResolver,
) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """
    Build a dependency admitting the resource owner or an administrator.

    ``resolve_owner_id`` receives the request and returns (or awaits to) the
    owner's id. It is not called for roles that bypass ownership. Errors it
    raises propagate unchanged.
    """

    async def ownership_guard(
        request: Request,
        user: AuthenticatedUser = Depends(get_current_user),
        policy: AccessPolicy = Depends(get_access_policy),
    ) -> AuthenticatedUser:
        if policy.bypasses_ownership(user.role):
            return user

        owner_id = resolve_owner_id(request)
        if inspect.isawaitable(owner_id):
            owner_id = await owner_id
        return check_ownership(user, owner_id, policy)

    return ownership_guard


require_admin = require_role([UserRole.ADMIN, UserRole.SUPER_ADMIN])
require_super_admin = require_role([UserRole.SUPER_ADMIN])
require_teacher = require_role([UserRole.TEACHER, UserRole.ADMIN, UserRole.SUPER_ADMIN])
