"""JWT access/refresh token codec."""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from src.config.settings import Settings
from src.database.base import utcnow

from .exceptions import InvalidTokenException, TokenExpiredException

Clock = Callable[[], datetime]


class TokenKind(StrEnum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Verified identity carried by a token."""

    subject_id: int
    email: str
    issued_at: datetime
    expires_at: datetime
    kind: TokenKind
    generation: int = 0


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenCodec:
    """Signs and verifies access and refresh tokens.

    Each kind has its own secret and lifetime, so a token of one kind never
    verifies as the other. Verification is pure: it knows nothing about
    rotation or revocation. Expiry is checked against the codec's clock rather
    than PyJWT's, which keeps issuing and verifying on the same timeline.
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow):
        self._algorithm = settings.jwt_algorithm
        self._clock = clock
        self._secrets = {
            TokenKind.ACCESS: settings.access_token_secret,
            TokenKind.REFRESH: settings.refresh_token_secret,
        }
        self._lifetimes = {
            TokenKind.ACCESS: timedelta(minutes=settings.access_token_expire_minutes),
            TokenKind.REFRESH: timedelta(days=settings.refresh_token_expire_days),
        }

    def lifetime(self, kind: TokenKind) -> timedelta:
        return self._lifetimes[kind]

    def _issue(self, kind: TokenKind, subject_id: int, email: str, generation: int) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "email": email,
            "type": kind.value,
            "iat": now,
            "exp": now + self._lifetimes[kind],
            "gen": generation,
            # Two tokens minted in the same second for the same user must differ
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)

    def issue_access_token(self, subject_id: int, email: str, generation: int = 0) -> str:
        """Create a short-lived access token (stateless, never persisted)."""
        return self._issue(TokenKind.ACCESS, subject_id, email, generation)

    def issue_refresh_token(self, subject_id: int, email: str, generation: int = 0) -> str:
        """Create a long-lived refresh token."""
        return self._issue(TokenKind.REFRESH, subject_id, email, generation)

    def issue_pair(self, subject_id: int, email: str, generation: int = 0) -> TokenPair:
        """Mint both tokens, stamped with the user's current session generation."""
        return TokenPair(
            access_token=self.issue_access_token(subject_id, email, generation),
            refresh_token=self.issue_refresh_token(subject_id, email, generation),
        )

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """Decode and verify a token of the given kind.

        Raises:
            InvalidTokenException: Bad signature, malformed token, missing claims or wrong kind.
            TokenExpiredException: The token's ``exp`` is not after the current time.

        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "email", "type", "iat", "exp"],
                },
            )
        except InvalidTokenError as err:
            raise InvalidTokenException() from err

        if payload.get("type") != kind.value:
            raise InvalidTokenException(detail=f"Invalid token type, expected {kind.value}")

        try:
            subject_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(payload["iat"], UTC)
            expires_at = datetime.fromtimestamp(payload["exp"], UTC)
            generation = int(payload.get("gen", 0))
        except (TypeError, ValueError) as err:
            raise InvalidTokenException(detail="Invalid token payload") from err

        if expires_at <= self._clock():
            raise TokenExpiredException()

        return TokenClaims(
            subject_id=subject_id,
            email=str(payload["email"]),
            issued_at=issued_at,
            expires_at=expires_at,
            kind=kind,
            generation=generation,
        )
