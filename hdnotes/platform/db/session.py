from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from hdnotes.platform.config import get_settings
from hdnotes.platform.db.base import Base

settings = get_settings()


def _engine_options() -> dict:
    if settings.is_sqlite:
        # aiosqlite connections are cheap; a fresh one per checkout keeps
        # them from leaking across event loops (tests, scripts)
        return {"poolclass": NullPool}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "pool_size": 20,
        "max_overflow": 30,  # (burst capacity)
        "pool_timeout": 30,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    **_engine_options(),
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


if settings.is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # ON DELETE CASCADE from users to codes and notes
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a DB session and ensures proper closing.
    """
    async with SessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create all tables. Used for local SQLite runs and tests; production uses alembic."""
    from hdnotes.platform.db import models  # noqa: F401  (registers tables on Base)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models() -> None:
    from hdnotes.platform.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def ping(db: AsyncSession) -> bool:
    await db.execute(text("SELECT 1"))
    return True
