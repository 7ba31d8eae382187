"""Database handle: engine, session factory and metadata."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Owns the async engine for one process.

    Constructed explicitly at startup, opened with :meth:`connect` and closed with
    :meth:`dispose`. Nothing in the package keeps a module level engine.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def connect(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self.url, echo=self.echo, future=True)
            if self._engine.dialect.name == "sqlite":
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            self._session_factory = async_sessionmaker(
                bind=self._engine, expire_on_commit=False, autoflush=False
            )
            logger.info(f"Database engine created for {self._engine.url.render_as_string()}")
        return self._engine

    @property
    def engine(self) -> AsyncEngine:
        return self.connect()

    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        self.connect()
        assert self._session_factory is not None
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        factory = self.session_factory()
        async with factory() as session:
            yield session

    async def create_all(self, drop: bool = False) -> None:
        """Create database tables (optionally dropping first)."""
        # Registers the mapped classes on Base.metadata.
        from meetassist.db import models  # noqa: F401

        async with self.engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
