"""
Database Connection
===================
Async connection using SQLAlchemy, only used when STORE_BACKEND=sql
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.config import Settings, settings as default_settings
from .models import Base

logger = logging.getLogger(__name__)


def create_engine(settings: Settings = None) -> AsyncEngine:
    settings = settings or default_settings
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine):
    """Create all tables (for development only - use migrations in production)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
