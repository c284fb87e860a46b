"""
User-related endpoints.

Provides profile lookup and account management. Every route requires
authentication; the role and ownership guards decide the rest.
"""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from modules.auth.rbac import require_admin, require_ownership_or_admin, require_super_admin
from modules.auth.tokens import TokenService
from modules.users.exceptions import UserNotFoundError
from modules.users.interfaces import IUserRepository
from modules.users.models import PublicUser
from shared.models import AuthenticatedUser

from ..dependencies import get_token_service, get_user_repository
from ..middleware.auth import get_current_user

router = APIRouter()


class UserResponse(BaseModel):
    """User profile response envelope."""

    success: bool = True
    data: PublicUser


class UserMessageResponse(BaseModel):
    success: bool = True
    message: str


def _path_user_id(request: Request) -> str:
    return request.path_params["user_id"]


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    users: IUserRepository = Depends(get_user_repository),
) -> UserResponse:
    """
    Get the current user's profile.

    Requires authentication.
    """
    record = users.get_by_id(user.id)
    if record is None:
        raise UserNotFoundError(user.id)
    return UserResponse(data=record.to_public())


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    requester: AuthenticatedUser = Depends(require_ownership_or_admin(_path_user_id)),
    users: IUserRepository = Depends(get_user_repository),
) -> UserResponse:
    """Get a user's profile. Owners see their own; admins see anyone's."""
    record = users.get_by_id(user_id)
    if record is None:
        raise UserNotFoundError(user_id)
    return UserResponse(data=record.to_public())


@router.delete("/{user_id}", response_model=UserMessageResponse)
async def delete_user(
    user_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    users: IUserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
) -> UserMessageResponse:
    """
    Soft-delete a user and end all of their sessions.

    Admin only.
    """
    if users.soft_delete(user_id) is None:
        raise UserNotFoundError(user_id)
    await tokens.revoke_all_user_tokens(user_id)
    return UserMessageResponse(message="User deleted successfully")


@router.post("/{user_id}/restore", response_model=UserResponse)
async def restore_user(
    user_id: str,
    admin: AuthenticatedUser = Depends(require_super_admin),
    users: IUserRepository = Depends(get_user_repository),
) -> UserResponse:
    """Undo a soft delete. SuperAdmin only."""
    record = users.restore(user_id)
    if record is None:
        raise UserNotFoundError(user_id)
    return UserResponse(data=record.to_public())
