"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config import get_settings


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable WAL mode + foreign keys on every new SQLite connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an async engine for the given URL.

    SQLite gets NullPool, so every state transaction opens its own
    connection, plus the pragmas above. Other databases get a pool.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by every store and service."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


settings = get_settings()

engine = create_engine_for(settings.database_url, echo=settings.debug)
async_session_maker = create_session_maker(engine)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create tables that do not exist yet."""
    # Import Base from kernel models to ensure all models are registered
    from src.kernel.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
