"""Database engine and session management."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by the settings."""

    connect_args: dict[str, object] = {}
    if settings.database_ssl_required:
        connect_args["ssl"] = True

    options: dict[str, object] = {"echo": False, "pool_pre_ping": True, "connect_args": connect_args}
    if not settings.database_url.startswith("sqlite"):
        options["pool_size"] = settings.database_pool_size

    return create_async_engine(settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the engine."""

    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

