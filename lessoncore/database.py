"""
Async engine and session handling (SQLAlchemy 2.0).

SQLite is the default for local runs and tests; any other URL is treated
as a pooled server database (asyncpg in production).
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from lessoncore.config import get_settings

# WAL lets readers proceed during a checkpoint completion; the busy timeout
# makes a second concurrent writer wait for the first instead of failing.
SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
)


def _apply_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create the engine for ``url``.

    SQLite connections are not pooled (one connection per session) and get
    SQLITE_PRAGMAS on connect. Lesson deletes rely on ``foreign_keys=ON`` to
    cascade to their checkpoint pools.
    """
    if make_url(url).get_backend_name() == "sqlite":
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(sqlite_engine.sync_engine, "connect", _apply_sqlite_pragmas)
        return sqlite_engine

    return create_async_engine(url, echo=echo, pool_pre_ping=True, pool_size=5, max_overflow=10)


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


settings = get_settings()
engine = build_engine(settings.database_url, echo=settings.debug)
async_session_maker = build_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request; commit if the handler returned normally."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    # Importing the package registers every model on Base.metadata
    from lessoncore.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
