"""Async Session Factory — DB sessions for code running outside FastAPI.

Used by the operator CLI (expiry sweep); the API goes through
infrastructure/database.py instead. Both build their engine from the same
engine_options, so the sweep sees the same UTC session settings.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from collabhub.infrastructure.database import engine_options


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and async session factory for the given database URL."""
    engine = create_async_engine(
        database_url, echo=False, **engine_options(database_url),
    )
    return engine, async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
