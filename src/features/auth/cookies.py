"""Refresh-token cookie carrier."""

from fastapi import Response

from src.config.settings import Settings


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the refresh token as an HTTP-only cookie scoped to the auth routes."""
    response.set_cookie(
        settings.refresh_cookie_name,
        token,
        max_age=settings.refresh_token_max_age_seconds,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.refresh_cookie_samesite,
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.refresh_cookie_samesite,
    )
