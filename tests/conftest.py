"""Test configuration and fixtures.

Test setup:
1. Every test gets a fresh in-memory SQLite database (aiosqlite), so tests are
   isolated without transaction tricks
2. The app and the services share one AsyncSession per test
3. Time is controlled by a FakeClock injected through the get_clock dependency,
   so token expiry and the rotation grace window can be exercised without sleeping
"""

import os

os.environ.update(
    {
        "ENVIRONMENT": "development",
        "DATABASE_URL": "sqlite+aiosqlite://",
        "ACCESS_TOKEN_SECRET": "test-access-secret-0123456789abcdef0123456789",
        "REFRESH_TOKEN_SECRET": "test-refresh-secret-0123456789abcdef012345678",
        "RATE_LIMIT_ENABLED": "false",
        "LOG_FORMAT": "console",
    }
)

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.config.settings import settings as app_settings  # noqa: E402
from src.database.base import Base, utcnow  # noqa: E402
from src.database.client import Database  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.auth.dependencies import get_clock  # noqa: E402
from src.features.auth.service import AuthService  # noqa: E402
from src.features.auth.sessions import SessionManager  # noqa: E402
from src.features.auth.store import CredentialStore  # noqa: E402
from src.features.auth.tokens import TokenCodec  # noqa: E402
from src.features.user.service import UserService  # noqa: E402
from src.main import app  # noqa: E402


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# Clock & Settings


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings():
    return app_settings


# Database Setup - Function Scope (fresh database per test)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine; StaticPool keeps the single connection (and its data) alive."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    database = Database(db_engine)
    app.state.database = database
    async with database.session_factory() as async_session:
        yield async_session


# FastAPI Client & Dependency Overrides


@pytest_asyncio.fixture(autouse=True)
async def override_dependencies(session: AsyncSession, clock: FakeClock):
    """Route handlers use the test's session and clock."""

    async def _get_test_session():
        yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    app.dependency_overrides[get_clock] = lambda: clock
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Service objects (same wiring as src.features.auth.dependencies)


@pytest.fixture
def codec(settings, clock) -> TokenCodec:
    return TokenCodec(settings, clock=clock)


@pytest.fixture
def store(session) -> CredentialStore:
    return CredentialStore(session)


@pytest.fixture
def session_manager(store, codec, settings, clock) -> SessionManager:
    return SessionManager(store, codec, settings, clock=clock)


@pytest.fixture
def auth_service(store, session_manager) -> AuthService:
    return AuthService(store, session_manager)


@pytest.fixture
def user_service(store, session_manager) -> UserService:
    return UserService(store, session_manager)


# Test User Factories


@pytest_asyncio.fixture
async def make_user(store: CredentialStore):
    """Factory fixture to create test users.

    Usage:
        user = await make_user()
        ann = await make_user(email="a@x.com", password="pw123456", name="Ann")
    """
    counter = 0

    async def _factory(email=None, password="TestPass123", name="Test User"):
        nonlocal counter
        counter += 1
        if email is None:
            email = f"testuser{counter}@example.com"
        return await store.create_user(email, password, name)

    return _factory

