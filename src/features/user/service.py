"""User service layer."""

import logging

from src.features.auth.sessions import SessionManager
from src.features.auth.store import CredentialStore

from .exceptions import IncorrectPassword, PasswordUnchanged, UserNotFound
from .models import User

logger = logging.getLogger(__name__)


class UserService:
    """Profile and credential management for the signed-in user."""

    def __init__(self, store: CredentialStore, sessions: SessionManager):
        self.store = store
        self.sessions = sessions

    async def get_profile(self, user_id: int) -> User:
        """Get user by ID.

        Raises:
            UserNotFound: If the account no longer exists.

        """
        user = await self.store.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    async def update_profile(self, user: User, name: str | None = None, email: str | None = None) -> User:
        """Update name and/or email.

        Raises:
            EmailAlreadyExists: If email is being changed to an existing email

        """
        user = await self.store.update_profile(user, name=name, email=email)
        logger.info(f"User profile updated: {user.email}")
        return user

    async def update_password(self, user: User, current_password: str, new_password: str) -> int:
        """Change the password and sign the user out everywhere.

        Args:
            user: User object
            current_password: Current password
            new_password: New password

        Returns:
            Number of refresh tokens revoked

        Raises:
            IncorrectPassword: If current password is incorrect
            PasswordUnchanged: If the new password equals the current one

        """
        if not self.store.verify_password(user, current_password):
            raise IncorrectPassword()
        if current_password == new_password:
            raise PasswordUnchanged()

        await self.store.set_password(user, new_password)
        revoked = await self.sessions.revoke_all(user.id)

        logger.info(f"Password changed for user: {user.email}")
        return revoked

    async def delete_account(self, user: User, password: str) -> None:
        """Permanently delete the account after re-checking the password.

        Raises:
            IncorrectPassword: If the password is incorrect

        """
        if not self.store.verify_password(user, password):
            raise IncorrectPassword(detail="Password is incorrect")

        email = user.email
        await self.sessions.revoke_all(user.id)
        await self.store.delete_user(user)
        logger.info(f"User account deleted: {email}")
