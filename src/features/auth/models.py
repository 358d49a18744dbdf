"""Refresh-token persistence models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, utcnow


class RefreshToken(Base):
    """A refresh token the user may currently exchange (the ACTIVE set).

    One row per token string; rows are only ever inserted or deleted by value.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(String(1024), unique=True, nullable=False)

    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    last_used_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class RefreshTokenHistory(Base):
    """The most recently rotated-out refresh token for a user.

    Single slot per user: ``user_id`` is the primary key, so each rotation
    replaces the previous entry.
    """

    __tablename__ = "refresh_token_history"

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    token: Mapped[str] = mapped_column(String(1024), nullable=False)
    successor_token: Mapped[str] = mapped_column(String(1024), nullable=False)
    retired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
