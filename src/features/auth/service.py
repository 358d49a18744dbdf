"""Authentication service layer."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from src.features.user.models import User

from .exceptions import InvalidCredentialsException, RefreshTokenMissingException
from .sessions import SessionManager
from .store import CredentialStore
from .tokens import TokenPair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    user: User
    tokens: TokenPair


class AuthService:
    """Registration, login, refresh and logout."""

    def __init__(self, store: CredentialStore, sessions: SessionManager):
        self.store = store
        self.sessions = sessions

    async def register(self, email: str, password: str, name: str) -> AuthResult:
        """Create an account and open its first session.

        Raises:
            EmailAlreadyExists: If the email is already registered.

        """
        user = await self.store.create_user(email, password, name)
        tokens = await self.sessions.issue_initial_session(user)
        logger.info(f"User registered: {user.email}")
        return AuthResult(user=user, tokens=tokens)

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Unknown emails and wrong passwords raise the same error so the
        response does not reveal which accounts exist.

        Raises:
            InvalidCredentialsException: If authentication fails.

        """
        user = await self.store.find_by_email(email)
        if user is None or not self.store.verify_password(user, password):
            logger.warning(f"Failed login attempt for: {email}")
            raise InvalidCredentialsException()

        tokens = await self.sessions.issue_initial_session(user)
        logger.info(f"User logged in: {user.email}")
        return AuthResult(user=user, tokens=tokens)

    async def refresh(self, refresh_token: str | None) -> AuthResult:
        """Rotate the presented refresh token."""
        if not refresh_token:
            raise RefreshTokenMissingException()

        result = await self.sessions.rotate(refresh_token)
        return AuthResult(user=result.user, tokens=result.tokens)

    async def logout(self, user: User, refresh_token: str | None) -> None:
        """Revoke the presented refresh token if there is one.

        Best effort: a missing, unknown or already revoked token is not an error.
        """
        if refresh_token:
            try:
                revoked = await self.sessions.revoke(user.id, refresh_token)
            except SQLAlchemyError:
                logger.exception(f"Failed to revoke refresh token on logout for {user.email}")
                await self.store.rollback()
            else:
                if not revoked:
                    logger.debug(f"Logout for {user.email} presented a token that was not active")
        logger.info(f"User logged out: {user.name} ({user.email})")
