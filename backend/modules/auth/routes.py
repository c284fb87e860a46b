"""
Authentication API endpoints.

Register, login and refresh are public; logout, logout-all and
change-password require a valid access token.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from api.dependencies import get_auth_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IAuthService
from .models import (
    AuthSessionResponse,
    ChangePasswordRequest,
    DeviceInfo,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
)

router = APIRouter()


def get_device_info(request: Request) -> DeviceInfo:
    """Describe the calling client for refresh token bookkeeping."""
    return DeviceInfo(
        user_agent=request.headers.get("user-agent"),
        ip=request.client.host if request.client else None,
    )


@router.post("/register", response_model=AuthSessionResponse, status_code=201)
async def register(
    request: RegisterRequest,
    device: DeviceInfo = Depends(get_device_info),
    service: IAuthService = Depends(get_auth_service),
) -> AuthSessionResponse:
    """
    Create an account and log it in.

    Admin roles cannot be self-assigned; the role defaults to Student.
    """
    session = await service.register(request, device)
    return AuthSessionResponse(data=session)


@router.post("/login", response_model=AuthSessionResponse)
async def login(
    request: LoginRequest,
    device: DeviceInfo = Depends(get_device_info),
    service: IAuthService = Depends(get_auth_service),
) -> AuthSessionResponse:
    """Log in with email and password."""
    session = await service.login(request.email, request.password, device)
    return AuthSessionResponse(data=session)


@router.post("/refresh", response_model=RefreshResponse, response_model_exclude_none=True)
async def refresh(
    request: RefreshRequest,
    device: DeviceInfo = Depends(get_device_info),
    service: IAuthService = Depends(get_auth_service),
) -> RefreshResponse:
    """Exchange a refresh token for a new access token."""
    result = await service.refresh_access_token(request.refresh_token, device)
    return RefreshResponse(data=result)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Optional[LogoutRequest] = Body(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Revoke the given refresh token.

    Without a refresh token there is nothing to revoke server-side and the
    client simply discards its tokens.
    """
    if request is not None and request.refresh_token:
        await service.logout(request.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke every refresh token of the current user."""
    await service.logout_all_devices(user.id)
    return MessageResponse(message="Logged out from all devices successfully")


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Change the current user's password and end every session."""
    await service.change_password(user.id, request.current_password, request.new_password)
    return MessageResponse(message="Password changed successfully. Please login again.")
