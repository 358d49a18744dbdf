"""Credential store: users, password hashes and refresh-token state.

Every mutation of the refresh-token collections is a single statement that
adds or removes rows by value, so concurrent requests for the same user
cannot overwrite each other's additions.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from src.database.base import as_utc, utcnow
from src.features.user.exceptions import EmailAlreadyExists
from src.features.user.models import User, normalize_email

from .models import RefreshToken, RefreshTokenHistory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotationHistory:
    """The most recently rotated-out token for a user."""

    token: str
    successor_token: str
    retired_at: datetime


class CredentialStore:
    """Persistence operations for one request's database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    # Users

    async def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == normalize_email(email))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def create_user(self, email: str, password: str, name: str) -> User:
        """Create a user with a hashed password.

        Raises:
            EmailAlreadyExists: If the email is already registered.

        """
        email = normalize_email(email)
        if await self.find_by_email(email) is not None:
            raise EmailAlreadyExists()

        user = User(email=email, name=name.strip(), hashed_password=User.hash_password(password))
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as err:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            raise EmailAlreadyExists() from err
        return user

    @staticmethod
    def verify_password(user: User, candidate: str) -> bool:
        return user.verify_password(candidate)

    async def set_password(self, user: User, new_password: str) -> None:
        user.hashed_password = User.hash_password(new_password)
        user.updated_at = utcnow()
        await self.session.flush()

    async def update_profile(self, user: User, name: str | None = None, email: str | None = None) -> User:
        """Update name and/or email.

        Raises:
            EmailAlreadyExists: If the new email belongs to another user.

        """
        if email is not None:
            email = normalize_email(email)
            if email != user.email:
                if await self.find_by_email(email) is not None:
                    raise EmailAlreadyExists()
                user.email = email

        if name is not None:
            user.name = name.strip()

        user.updated_at = utcnow()
        await self.session.flush()
        return user

    async def delete_user(self, user: User) -> None:
        """Delete a user together with all refresh-token state."""
        await self.clear_refresh_tokens(user.id)
        await self.replace_rotation_history(user.id, None)
        await self.session.delete(user)
        await self.session.flush()

    # Active refresh tokens

    async def list_refresh_tokens(self, user_id: int) -> list[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id).order_by(RefreshToken.issued_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_refresh_token(self, user_id: int, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id, RefreshToken.token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def append_refresh_token(self, user_id: int, token: str, issued_at: datetime | None = None) -> None:
        issued_at = issued_at or utcnow()
        self.session.add(RefreshToken(user_id=user_id, token=token, issued_at=issued_at, last_used_at=issued_at))
        await self.session.flush()

    async def remove_refresh_token(self, user_id: int, token: str) -> bool:
        """Remove one token by value. Returns whether a row was removed."""
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id, RefreshToken.token == token)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def prune_expired_refresh_tokens(self, user_id: int, older_than: datetime) -> int:
        """Remove tokens issued before ``older_than``. Returns the number removed."""
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id, RefreshToken.issued_at < older_than)
        # Datetime criteria can't be evaluated in Python against naive values loaded from SQLite
        result = await self.session.execute(stmt, execution_options={"synchronize_session": "fetch"})
        return result.rowcount

    async def clear_refresh_tokens(self, user_id: int) -> int:
        result = await self.session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        return result.rowcount

    async def advance_session_generation(self, user_id: int) -> int:
        """Invalidate every token minted so far. Returns the new generation."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(session_generation=User.session_generation + 1)
            .returning(User.session_generation)
        )
        result = await self.session.execute(stmt, execution_options={"synchronize_session": False})
        generation = result.scalar_one()
        # Keep an already loaded instance in step without a lazy reload
        user = await self.session.get(User, user_id)
        if user is not None:
            set_committed_value(user, "session_generation", generation)
        return generation

    # Rotation history (single slot)

    async def get_rotation_history(self, user_id: int) -> RotationHistory | None:
        stmt = select(
            RefreshTokenHistory.token,
            RefreshTokenHistory.successor_token,
            RefreshTokenHistory.retired_at,
        ).where(RefreshTokenHistory.user_id == user_id)
        result = await self.session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return RotationHistory(
            token=row.token,
            successor_token=row.successor_token,
            retired_at=as_utc(row.retired_at),
        )

    async def replace_rotation_history(self, user_id: int, entry: RotationHistory | None) -> None:
        """Store ``entry`` in the history slot, or clear the slot when ``entry`` is None.

        Writing is a single upsert keyed on ``user_id``, so two devices of one
        user rotating at the same time both succeed and the later write wins.
        """
        if entry is None:
            await self.session.execute(delete(RefreshTokenHistory).where(RefreshTokenHistory.user_id == user_id))
            return

        insert = sqlite_insert if self.session.get_bind().dialect.name == "sqlite" else postgresql_insert
        stmt = insert(RefreshTokenHistory).values(
            user_id=user_id,
            token=entry.token,
            successor_token=entry.successor_token,
            retired_at=entry.retired_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RefreshTokenHistory.user_id],
            set_={
                "token": stmt.excluded.token,
                "successor_token": stmt.excluded.successor_token,
                "retired_at": stmt.excluded.retired_at,
            },
        )
        await self.session.execute(stmt)
