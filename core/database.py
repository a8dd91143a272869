"""Async SQLAlchemy database engine and session management.

Provides an explicit ``Database`` handle with a defined lifecycle:
- opened once at process start (``await db.connect()``)
- passed to repositories, which open one session per operation
- disposed on shutdown (``await db.close()``)

Works with any async driver SQLAlchemy supports; the default is a SQLite
file through aiosqlite.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.models.base import Base
from core.settings import Settings

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised when a session is requested from a closed Database."""


class Database:
    """Engine + session factory pair.

    Usage::

        db = Database.from_settings(settings)
        await db.connect()
        async with db.session() as session:
            result = await session.execute(select(TaskRow))
        await db.close()
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False,
    ):
        self.url = url
        self._engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        # SQLite pools are chosen by the dialect and reject sizing arguments
        if make_url(url).get_backend_name() != "sqlite":
            self._engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            echo=settings.echo_sql,
        )

    # -- Lifecycle --

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseUnavailableError("Database is not connected; call connect() first")
        return self._engine

    async def connect(self, create_tables: bool = True) -> None:
        """Create the engine and (optionally) the schema."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, **self._engine_kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        if create_tables:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connected url=%s", make_url(self.url).render_as_string(hide_password=True))

    async def close(self) -> None:
        """Dispose of the connection pool."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database closed")

    # -- Sessions --

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; commit on success, roll back on error."""
        if self._session_factory is None:
            raise DatabaseUnavailableError("Database is not connected; call connect() first")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

def get_database(request: Request) -> Database:
    """Return the Database opened by the app lifespan.

    Usage in FastAPI routes::

        @router.get("/items")
        async def list_items(db: Database = Depends(get_database)):
            ...
    """
    return request.app.state.database
