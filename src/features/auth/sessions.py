"""Refresh-token rotation and reuse detection.

A refresh token moves through three states:

    ACTIVE    listed in ``refresh_tokens``; exchanging it rotates it.
    ROTATED   just replaced; held in the user's single history slot. For
              ``refresh_grace_seconds`` after rotation it is still accepted and
              answered with the successor token, which absorbs duplicate
              in-flight refreshes from the same client.
    CONSUMED  in neither place. Presenting it while its absolute lifetime has
              not run out means someone else already used it, so every session
              of the user is revoked.

Only the most recent rotation is remembered per user. Tracking grace per token
would let an attacker replaying an older consumed token slip through.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from src.config.settings import Settings
from src.database.base import utcnow
from src.features.user.models import User

from .exceptions import (
    InvalidTokenException,
    RefreshTokenInvalidException,
    SecurityViolationException,
    SessionExpiredException,
    TokenExpiredException,
)
from .store import CredentialStore, RotationHistory
from .tokens import Clock, TokenClaims, TokenCodec, TokenKind, TokenPair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotationResult:
    user: User
    tokens: TokenPair
    grace: bool = False


class SessionManager:
    """Issues, rotates and revokes refresh-token sessions."""

    def __init__(self, store: CredentialStore, codec: TokenCodec, settings: Settings, clock: Clock = utcnow):
        self.store = store
        self.codec = codec
        self.clock = clock
        self.grace_window = timedelta(seconds=settings.refresh_grace_seconds)
        self.session_max_age = timedelta(days=settings.refresh_token_expire_days)

    async def issue_initial_session(self, user: User) -> TokenPair:
        """Start a new session chain (login or registration).

        The history slot is left alone: another device may still be inside the
        grace window of its latest rotation.
        """
        tokens = self.codec.issue_pair(user.id, user.email, user.session_generation)
        await self.store.append_refresh_token(user.id, tokens.refresh_token, issued_at=self.clock())
        return tokens

    async def rotate(self, presented_token: str) -> RotationResult:
        """Exchange a refresh token for a new token pair.

        Raises:
            RefreshTokenInvalidException: Token fails verification or its user no longer exists.
            SessionExpiredException: Token is past its absolute lifetime.
            SecurityViolationException: Token was already consumed; all sessions were revoked.

        """
        claims = self._verify(presented_token)

        user = await self.store.find_by_id(claims.subject_id)
        if user is None:
            logger.info(f"Refresh token presented for missing user {claims.subject_id}")
            raise RefreshTokenInvalidException(detail="User not found")

        if await self.store.find_refresh_token(user.id, presented_token) is None:
            return await self._handle_unknown_token(user, claims, presented_token)

        now = self.clock()
        pruned = await self.store.prune_expired_refresh_tokens(user.id, older_than=now - self.session_max_age)
        if pruned:
            logger.debug(f"Pruned {pruned} expired refresh tokens for user {user.id}")

        if not await self.store.remove_refresh_token(user.id, presented_token):
            # A concurrent request rotated this token between our lookup and the delete
            return await self._handle_unknown_token(user, claims, presented_token)

        tokens = self.codec.issue_pair(user.id, user.email, user.session_generation)
        await self.store.append_refresh_token(user.id, tokens.refresh_token, issued_at=now)
        await self.store.replace_rotation_history(
            user.id,
            RotationHistory(token=presented_token, successor_token=tokens.refresh_token, retired_at=now),
        )

        logger.info(f"Token refreshed for user: {user.name} ({user.email})")
        return RotationResult(user=user, tokens=tokens)

    async def revoke(self, user_id: int, token: str) -> bool:
        """Revoke a single refresh token. Idempotent."""
        return await self.store.remove_refresh_token(user_id, token)

    async def revoke_all(self, user_id: int) -> int:
        """Revoke every session of a user and forget the rotation history."""
        revoked = await self.store.clear_refresh_tokens(user_id)
        await self.store.replace_rotation_history(user_id, None)
        await self.store.advance_session_generation(user_id)
        logger.info(f"Revoked {revoked} refresh tokens for user {user_id}")
        return revoked

    def _verify(self, token: str) -> TokenClaims:
        try:
            return self.codec.verify(token, TokenKind.REFRESH)
        except TokenExpiredException as err:
            raise SessionExpiredException() from err
        except InvalidTokenException as err:
            raise RefreshTokenInvalidException() from err

    async def _handle_unknown_token(self, user: User, claims: TokenClaims, token: str) -> RotationResult:
        """Classify a verified token that is not in the active set."""
        now = self.clock()
        history = await self.store.get_rotation_history(user.id)

        if history is not None and history.token == token and now - history.retired_at <= self.grace_window:
            if await self.store.find_refresh_token(user.id, history.successor_token) is None:
                # Successor was revoked (logout) since the rotation
                raise RefreshTokenInvalidException()
            logger.info(f"Grace reuse of refresh token for user: {user.name} ({user.email})")
            tokens = TokenPair(
                access_token=self.codec.issue_access_token(user.id, user.email, user.session_generation),
                refresh_token=history.successor_token,
            )
            return RotationResult(user=user, tokens=tokens, grace=True)

        if claims.issued_at + self.session_max_age < now:
            raise SessionExpiredException()

        if claims.generation < user.session_generation:
            # Minted before a revoke-all: deliberately revoked, not stolen
            raise RefreshTokenInvalidException(detail="Session has been revoked. Please log in again.")

        logger.warning(f"Token reuse detected for user: {user.name} ({user.email})")
        await self.revoke_all(user.id)
        # The revocation must survive the error response rolling back the request
        await self.store.commit()
        raise SecurityViolationException()
