"""
Async SQLAlchemy engine and session factory construction.

Nothing here is created at import time; the bootstrap layer builds one
engine per application and hands it to the user store.
"""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Build an engine for ``settings.database_url``."""
    kwargs: Dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if settings.database_url.startswith("postgresql+asyncpg"):
        kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_pool_size * 2,
            pool_recycle=3600,
            pool_timeout=settings.database_connect_timeout,
            connect_args={
                "timeout": settings.database_connect_timeout,
                "command_timeout": settings.database_command_timeout,
            },
        )
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
