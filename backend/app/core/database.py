"""Database configuration, session management and unit of work."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings

logger = structlog.get_logger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql+asyncpg"):
        return {
            "server_settings": {
                "jit": "off",
                "statement_timeout": "30000",  # 30 seconds timeout
            },
            "command_timeout": 30,
        }
    return {}


# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    poolclass=NullPool,
    connect_args=_connect_args(settings.DATABASE_URL),
)

# Create session factory
async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get async database session.

    Services own their commits; anything left pending when the request fails
    is rolled back here.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a block of work as a single transaction.

    Commits when the block exits normally, rolls back on any exception and
    re-raises it, so callers never observe partial writes.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise


async def init_db() -> None:
    """Initialize database tables."""
    from app.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized")


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()


# Alias for FastAPI dependency injection
get_db = get_async_session
