"""Database connection and session management."""

import logging
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from bookvault.core.config import settings
from bookvault.infrastructure.database.models import Base

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.database_url, echo=False, future=True)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session (one per request)."""
    async with async_session_maker() as session:
        yield session


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """Initialize database tables."""
    ensure_sqlite_directory(settings.database_url)
    await create_tables(engine)
    logger.info("Database ready at %s", make_url(settings.database_url).render_as_string(hide_password=True))


async def close_db() -> None:
    await engine.dispose()
