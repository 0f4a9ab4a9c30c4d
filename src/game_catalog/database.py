"""
Database handle for the relational catalog store.

Owns the async SQLAlchemy engine and session factory. One handle is
constructed per process and passed to every component that needs it.
"""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from game_catalog.config import DatabaseConfig
from game_catalog.logger import get_logger


class Base(DeclarativeBase):
    """Declarative base for catalog tables."""


class Database:
    """
    Process-owned connection pool and session factory.

    Example:
        >>> db = Database("sqlite+aiosqlite:///./catalog.db")
        >>> await db.create_schema()
        >>> async with db.session() as session:
        ...     ...
        >>> await db.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_recycle: int = 3600,
    ) -> None:
        self._url = url
        self._logger = get_logger(__name__, component="database")

        is_sqlite = url.startswith("sqlite")
        engine_kwargs: dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": True,
            "pool_recycle": pool_recycle,
        }
        if not is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max_overflow,
                }
            )

        self._engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "Database":
        """Build a handle from the database configuration section."""
        return cls(
            config.url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_recycle=config.pool_recycle,
        )

    @property
    def engine(self) -> AsyncEngine:
        """Underlying async engine."""
        return self._engine

    def session(self) -> AsyncSession:
        """Open a new session; use as an async context manager."""
        return self._sessionmaker()

    async def create_schema(self) -> None:
        """Create all catalog tables that do not exist yet."""
        # Table definitions must be registered on the metadata first
        from game_catalog.catalog import models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._logger.info("Schema ready", tables=sorted(Base.metadata.tables))

    async def drop_schema(self) -> None:
        """Drop all catalog tables."""
        from game_catalog.catalog import models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        self._logger.warning("Schema dropped")

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
        self._logger.debug("Engine disposed")
