"""Async database engine and session management.

The engine lives on an explicitly constructed ``Database`` object that the
application opens on startup and closes on shutdown. Request handlers get a
session through ``get_db``; tests build their own ``Database`` and install it
on ``app.state``.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from carebook.models.base import Base


class Database:
    """Owns one async engine and its session factory."""

    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.url = url
        self.echo = echo
        self._engine_kwargs = engine_kwargs
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    async def open(self) -> None:
        if self.is_open:
            return
        kwargs = dict(self._engine_kwargs)
        if not self.url.startswith("sqlite"):
            kwargs.setdefault("pool_size", 20)
            kwargs.setdefault("max_overflow", 10)
            kwargs.setdefault("pool_pre_ping", True)
        self.engine = create_async_engine(self.url, echo=self.echo, **kwargs)
        self._session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def close(self) -> None:
        if not self.is_open:
            return
        await self.engine.dispose()
        self.engine = None
        self._session_factory = None

    def session(self) -> AsyncSession:
        if not self.is_open:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    async def create_all(self) -> None:
        """Create all tables. Used by tests and the seed script."""
        if not self.is_open:
            raise RuntimeError("Database is not open")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session. Used as a FastAPI dependency."""
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
