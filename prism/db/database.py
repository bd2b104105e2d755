"""
Database engine and session management.

Provides the async SQLAlchemy engine and session factory used by the API.
SQLite (the default for a single-user install) gets foreign keys switched
on so deck rows follow their prism on delete.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from prism.config import settings
from prism.models.db import Base


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, enabling SQLite foreign keys when needed."""
    new_engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    if new_engine.dialect.name == "sqlite":

        @event.listens_for(new_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Commits when the request handler returns, rolls back on database errors.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(target: AsyncEngine | None = None) -> None:
    """
    Create all tables defined in the ORM models.

    Called once at application startup; tests pass their own engine.
    """
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
