"""Authentication dependencies for FastAPI.

Services are assembled per request from explicit parts (settings, clock,
database session) instead of module-level singletons, so tests can swap any
of them through ``app.dependency_overrides``.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import Settings, get_settings
from src.database.base import utcnow
from src.database.dependencies import get_db_session
from src.features.user.models import User
from src.features.user.service import UserService

from .exceptions import AuthenticationException, InvalidTokenException
from .service import AuthService
from .sessions import SessionManager
from .store import CredentialStore
from .tokens import Clock, TokenClaims, TokenCodec, TokenKind

security = HTTPBearer(auto_error=False)


def get_clock() -> Clock:
    return utcnow


def get_token_codec(settings: Settings = Depends(get_settings), clock: Clock = Depends(get_clock)) -> TokenCodec:
    return TokenCodec(settings, clock=clock)


def get_credential_store(session: AsyncSession = Depends(get_db_session)) -> CredentialStore:
    return CredentialStore(session)


def get_session_manager(
    store: CredentialStore = Depends(get_credential_store),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> SessionManager:
    return SessionManager(store, codec, settings, clock=clock)


def get_auth_service(
    store: CredentialStore = Depends(get_credential_store),
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthService:
    return AuthService(store, sessions)


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
) -> TokenClaims:
    """Verify the bearer access token and return its claims.

    Raises:
        AuthenticationException: If no bearer token was sent.
        InvalidTokenException: If the token is invalid, expired or not an access token.

    """
    if credentials is None:
        raise AuthenticationException(detail="No token provided")
    return codec.verify(credentials.credentials, TokenKind.ACCESS)


async def get_current_user(
    claims: TokenClaims = Depends(get_current_claims),
    store: CredentialStore = Depends(get_credential_store),
) -> User:
    """Load the user named by the access token.

    Raises:
        InvalidTokenException: If the account no longer exists.

    """
    user = await store.find_by_id(claims.subject_id)
    if user is None:
        raise InvalidTokenException(detail="User not found")
    return user


def get_user_service(
    store: CredentialStore = Depends(get_credential_store),
    sessions: SessionManager = Depends(get_session_manager),
) -> UserService:
    return UserService(store, sessions)
