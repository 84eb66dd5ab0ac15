"""Async engine and session pool for the snapshot store."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

_IN_MEMORY_URL = "sqlite+aiosqlite://"


class Base(DeclarativeBase):
    """Declarative base for the observed-record tables."""


class Database:
    """Owns one async engine and the session pool built on it.

    Built once by the app factory (or a test fixture) and handed to every
    DAO, so two apps in one process never share an engine.
    """

    def __init__(self, database_url: str) -> None:
        options: dict[str, Any] = {"echo": False}
        if database_url == _IN_MEMORY_URL:
            # One shared connection, otherwise every session sees an empty DB.
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        self._engine: AsyncEngine | None = create_async_engine(database_url, **options)
        self._pool = async_sessionmaker(self._engine, expire_on_commit=False)

    @property
    def pool(self) -> async_sessionmaker[AsyncSession]:
        """Session factory shared by all DAOs."""
        return self._pool

    async def create_tables(self) -> None:
        """Create the observed_commands and observed_events tables."""
        import fleetwatch.models

        _ = fleetwatch.models  # registers table metadata on Base
        assert self._engine is not None, "database already closed"
        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine. Safe to call twice."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
