"""Async token store handle with an explicit connect/disconnect lifecycle."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .errors import ConfigurationError
from .models import Base

logger = logging.getLogger(__name__)


class TokenStore:
    """Owns the engine and session factory for the token collection.

    Usage:
        store = TokenStore("sqlite+aiosqlite:///:memory:")
        await store.connect()
        async with store.session() as session:
            ...
        await store.disconnect()
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Create the engine and make sure the tokens table exists."""
        if self._engine is not None:
            return
        if self.database_url.startswith("mongodb"):
            raise ConfigurationError(
                "A MongoDB URI is not supported; set DATABASE_URL to an async SQLAlchemy URL"
            )

        self._engine = create_async_engine(self.database_url, echo=self.echo)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Token store connected")

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Token store disconnected")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._session_factory is None:
            raise ConfigurationError("Token store is not connected")
        async with self._session_factory() as session:
            yield session

    async def ping(self) -> None:
        async with self.session() as session:
            await session.execute(text("SELECT 1"))
