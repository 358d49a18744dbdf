"""Database connection management with SQLAlchemy."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.config.settings import Settings
from src.database.base import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and session factory for one application instance.

    Built in the application lifespan and stored on ``app.state.database``;
    request handlers reach it through ``get_db_session``.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        options: dict = {"echo": settings.database_echo, "pool_pre_ping": True}
        if not settings.database_url.startswith("sqlite"):
            options.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_timeout=settings.database_pool_timeout,
                pool_recycle=settings.database_pool_recycle,
            )
        return cls(create_async_engine(settings.database_url, **options))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Yield a session that commits on success and rolls back on error.

        Usage:
            async with database.session() as session:
                user = await CredentialStore(session).find_by_id(user_id)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def connect(self) -> None:
        """Verify connectivity and create missing tables."""
        logger.info(f"Connecting to database at {self.engine.url.render_as_string(hide_password=True)}")
        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise
        logger.info("Database initialization complete")

    async def close(self) -> None:
        """Dispose of the connection pool."""
        logger.info("Closing database connection")
        await self.engine.dispose()
