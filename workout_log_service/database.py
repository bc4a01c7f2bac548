from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Any

import structlog
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import get_settings

logger = structlog.get_logger(__name__)

Base = declarative_base()


def ensure_async_driver_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def ensure_sync_driver_url(url: str) -> str:
    """Alembic runs migrations through a synchronous engine."""
    if "+asyncpg" in url:
        return url.replace("postgresql+asyncpg", "postgresql+psycopg2", 1)
    if "+aiosqlite" in url:
        return url.replace("sqlite+aiosqlite", "sqlite", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # ON DELETE CASCADE is a no-op in SQLite unless enforced per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_async_engine_and_session(
    database_url: str,
    *,
    echo: bool = False,
    expire_on_commit: bool = False,
    autoflush: bool = False,
    **engine_kwargs: Any,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    database_url = ensure_async_driver_url(database_url)
    engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(
        "database_engine_created",
        dialect=engine.dialect.name,
        url=make_url(database_url).render_as_string(hide_password=True),
    )

    session_factory = async_sessionmaker(
        bind=engine,
        expire_on_commit=expire_on_commit,
        autoflush=autoflush,
        class_=AsyncSession,
    )
    return engine, session_factory


@lru_cache()
def _default_engine_and_session() -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    settings = get_settings()
    return create_async_engine_and_session(
        settings.WORKOUT_LOG_DATABASE_URL,
        echo=settings.DATABASE_ECHO,
    )


def get_engine() -> AsyncEngine:
    return _default_engine_and_session()[0]


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return _default_engine_and_session()[1]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    if _default_engine_and_session.cache_info().currsize:
        await get_engine().dispose()
        _default_engine_and_session.cache_clear()
