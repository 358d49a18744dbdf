"""User domain models."""

from pwdlib import PasswordHash
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin

pwd_hasher = PasswordHash.recommended()


def normalize_email(email: str) -> str:
    """Emails are stored and looked up trimmed and lower-cased."""
    return email.strip().lower()


class User(Base, TimestampMixin):
    """Registered account.

    Refresh-token state lives in child tables (see ``src.features.auth.models``)
    and is only touched through ``CredentialStore``.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Bumped by every revoke-all; refresh tokens minted under an older generation were revoked, not consumed
    session_generation: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    def verify_password(self, plain_password: str) -> bool:
        """Verify a password against the hash using Argon2.

        Salt is automatically extracted from the hash by pwdlib.
        """
        return pwd_hasher.verify(plain_password, self.hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using Argon2.

        Salt is automatically generated and embedded in the returned hash.
        """
        return pwd_hasher.hash(password)
