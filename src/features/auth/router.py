"""Authentication router (session lifecycle endpoints)."""

import logging

from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import Settings, get_settings, settings as app_settings
from src.database.dependencies import get_db_session
from src.features.user.models import User
from src.features.user.schemas import UserResponse
from src.shared.rate_limit import limiter

from .cookies import clear_refresh_cookie, set_refresh_cookie
from .dependencies import get_auth_service, get_current_user
from .schemas import AuthResponse, LoginRequest, MessageResponse, RegisterRequest
from .service import AuthResult, AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(message: str, result: AuthResult, response: Response, settings: Settings) -> AuthResponse:
    set_refresh_cookie(response, result.tokens.refresh_token, settings)
    return AuthResponse(
        message=message,
        access_token=result.tokens.access_token,
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(app_settings.auth_rate_limit)
async def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Register a new account.

    - **email**: Email address (validated via email-validator)
    - **password**: Password (minimum 6 characters)
    - **name**: Display name (2-50 characters)

    Returns the access token; the refresh token is set as an HTTP-only cookie.
    """
    result = await service.register(data.email, data.password, data.name)
    await session.commit()
    return _auth_response("User registered successfully", result, response, settings)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(app_settings.auth_rate_limit)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Login with email and password.

    Returns the access token; the refresh token is set as an HTTP-only cookie.
    """
    result = await service.login(data.email, data.password)
    await session.commit()
    return _auth_response("Login successful", result, response, settings)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    response: Response,
    refresh_token: str | None = Cookie(None, alias=app_settings.refresh_cookie_name),
    service: AuthService = Depends(get_auth_service),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Exchange the refresh cookie for a new access token and a rotated refresh cookie.

    Any failure clears the cookie. Presenting an already consumed token
    revokes every session of the account and returns 403.
    """
    result = await service.refresh(refresh_token)
    await session.commit()
    return _auth_response("Token refreshed successfully", result, response, settings)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    refresh_token: str | None = Cookie(None, alias=app_settings.refresh_cookie_name),
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Logout: revoke the refresh cookie's token and clear the cookie. Idempotent."""
    await service.logout(current_user, refresh_token)
    await session.commit()
    clear_refresh_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")
