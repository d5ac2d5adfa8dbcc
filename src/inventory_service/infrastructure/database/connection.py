"""Database connection management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from inventory_service.config import Settings, get_settings


def get_async_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create async database engine with connection pooling."""
    settings = settings or get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        pool_recycle=settings.db_pool_recycle,
    )


def get_async_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create async session factory."""
    return async_sessionmaker(
        engine or get_async_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Global session factory
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = get_async_session_factory()
    return _session_factory


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session as async context manager."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to get database session."""
    async with get_db_session() as session:
        yield session


@asynccontextmanager
async def transaction_scope(
    session_factory: async_sessionmaker[AsyncSession],
    isolation_level: str | None = None,
    lock_timeout_seconds: float | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a unit of work in one transaction on a fresh session.

    Commits when the block exits normally and rolls back everything
    written inside the block on any exception.

    Args:
        session_factory: Factory producing the session for this unit of work
        isolation_level: Transaction isolation level, e.g. "READ COMMITTED"
        lock_timeout_seconds: Max time a statement waits on a row lock
            (PostgreSQL only)
    """
    async with session_factory() as session:
        try:
            execution_options = {}
            if isolation_level:
                execution_options["isolation_level"] = isolation_level
            connection = await session.connection(execution_options=execution_options)

            if lock_timeout_seconds and connection.dialect.name == "postgresql":
                lock_timeout_ms = int(lock_timeout_seconds * 1000)
                await session.execute(text(f"SET LOCAL lock_timeout = {lock_timeout_ms}"))

            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
