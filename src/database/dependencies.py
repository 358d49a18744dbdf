"""Database dependencies."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.client import Database


def get_database(request: Request) -> Database:
    """Return the Database built by the application lifespan."""
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session for the current request.

    Routes commit explicitly once their work is done; an exception anywhere in
    the request rolls the session back.
    """
    async with get_database(request).session() as session:
        yield session
