"""User account router (profile and credential management)."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import Settings, get_settings
from src.database.dependencies import get_db_session
from src.features.auth.cookies import clear_refresh_cookie
from src.features.auth.dependencies import get_current_user, get_user_service
from src.features.auth.schemas import MessageResponse

from .models import User
from .schemas import (
    AccountDeleteRequest,
    PasswordChangeRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    UserResponse,
)
from .service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["User Account"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Get current user information."""
    user = await service.get_profile(current_user.id)
    return ProfileResponse(user=UserResponse.model_validate(user))


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Update current user's own profile (name, email)."""
    user = await service.update_profile(current_user, name=data.name, email=data.email)
    await session.commit()
    return ProfileResponse(message="Profile updated successfully", user=UserResponse.model_validate(user))


@router.put("/password", response_model=MessageResponse)
async def update_password(
    data: PasswordChangeRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Change current user's password. Every session is revoked; the user must log in again."""
    await service.update_password(current_user, data.current_password, data.new_password)
    await session.commit()
    clear_refresh_cookie(response, settings)
    return MessageResponse(message="Password updated successfully. Please log in again.")


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    data: AccountDeleteRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Permanently delete current user's account (password confirmation required)."""
    await service.delete_account(current_user, data.password)
    await session.commit()
    clear_refresh_cookie(response, settings)
    return MessageResponse(message="Account deleted successfully")
