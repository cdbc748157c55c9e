# opsadmin/adapters/outbound/persistence/database.py (async version)

import logging
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from opsadmin.adapters.configuration.config import Settings


def create_engine_from_settings(settings: Settings, logger: Optional[logging.Logger] = None) -> AsyncEngine:
    """
    Create the async engine described by the settings.

    SQLite (used in tests and local runs) does not accept the pool options.
    """
    logger = logger or logging.getLogger(__name__)
    database_url = str(settings.DATABASE_URL)
    logger.info(f"Connecting to database: {database_url.split('@')[-1]}")

    options = {"echo": False, "future": True}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
        )

    try:
        engine = create_async_engine(database_url, **options)
    except SQLAlchemyError as e:
        logger.error(f"Error connecting to database: {str(e)}")
        raise

    logger.info("Async database connection configured successfully")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )


@asynccontextmanager
async def get_db_context(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides an async context for database operations,
    rolling back on error and closing the session at the end.

    Example:
        ```python
        async with get_db_context(app.state.session_factory) as db:
            users = await db.execute(select(User))
            result = users.scalars().all()
        ```
    """
    session = session_factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection for use with FastAPI.

    Services commit their own units of work; the session is only
    rolled back and closed here.
    """
    async with get_db_context(request.app.state.session_factory) as session:
        yield session
