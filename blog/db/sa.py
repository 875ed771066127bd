from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from blog.config import DB_DSN
from blog.db.base import Base


logger = logging.getLogger("blog.db")

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


def to_async_dsn(dsn: str | None) -> str:
    if not dsn:
        raise RuntimeError("DATABASE_URL is not configured")
    # Ensure SQLAlchemy asyncpg dialect
    if dsn.startswith("postgresql+asyncpg://"):
        return dsn
    if dsn.startswith("postgresql://"):
        return dsn.replace("postgresql://", "postgresql+asyncpg://", 1)
    if dsn.startswith("postgres://"):
        return dsn.replace("postgres://", "postgresql+asyncpg://", 1)
    # Fallback: assume already usable (e.g. sqlite+aiosqlite://)
    return dsn


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


async def init_sa_engine(dsn: str | None = None) -> None:
    global _engine, _sessionmaker
    if _engine is None:
        async_dsn = to_async_dsn(dsn or DB_DSN)
        _engine = create_async_engine(async_dsn, pool_pre_ping=True)
        _sessionmaker = make_sessionmaker(_engine)
        logger.info("Database engine initialised", extra={"event": "db_engine_init"})


async def close_sa_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def engine() -> Optional[AsyncEngine]:
    return _engine


def sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _sessionmaker is None:
        raise RuntimeError("SQLAlchemy engine is not initialized. Call init_sa_engine() first.")
    return _sessionmaker


async def create_tables(target: AsyncEngine) -> None:
    """Create the articles table when it does not exist yet."""
    from blog.models import article  # noqa: F401 ensure model registration

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """One session, one transaction: commit on success, rollback on any exit.

    BaseException is caught so a cancelled task still rolls back before the
    connection goes back to the pool.
    """
    session = factory()
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
    finally:
        await session.close()
