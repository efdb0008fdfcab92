"""
Idea Hub Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine + session factory wrapper, the declarative base,
       the per-request session dependency and the error translation decorator.
How:   The application lifespan builds one DatabaseManager and stores it on
       `app.state.db`. Each request gets its own AsyncSession from it through
       `get_db_session`, committed on success and rolled back on error.
       Scripts (seed, alembic) build their own manager from settings.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite (tests) keeps SQLAlchemy's default pool and turns on foreign keys
    per connection so ON DELETE CASCADE behaves as it does in PostgreSQL.
"""

import functools
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Awaitable, Callable, Optional, TypeVar

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ideahub.config import Settings, settings as default_settings
from ideahub.exceptions import DatabaseError, IdeaHubError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for autogenerate.
    """
    pass


def new_id() -> str:
    """Primary keys are string UUIDs generated client-side."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Owns the async engine and session factory for one process.

    Lifecycle:
        Created by the app lifespan (or a script), disposed on shutdown.
        Nothing in the request path creates engines.
    """

    def __init__(self, database_url: str, echo: bool = False, **engine_kwargs: Any):
        self.database_url = database_url
        self.is_sqlite = database_url.startswith("sqlite")
        if self.is_sqlite:
            # SQLite's pool classes reject pool_size / max_overflow
            engine_kwargs = {}
        self.engine: AsyncEngine = create_async_engine(database_url, echo=echo, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: response shaping reads attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "DatabaseManager":
        """Builds a manager with the pool configuration from settings."""
        config = config or default_settings
        return cls(
            config.database_url,
            echo=config.log_level == "DEBUG",
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Unit-of-work scope: commit when the block exits cleanly,
        roll back on any exception, always close.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Creates every table known to Base.metadata (tests and local dev)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def health_check(self) -> bool:
        """Runs SELECT 1; returns False instead of raising."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Closes every pooled connection."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/ideas")
        async def list_ideas(db: AsyncSession = Depends(get_db_session)):
            ...

    Raises:
        RuntimeError: the app was started without a DatabaseManager.
    """
    manager: Optional[DatabaseManager] = getattr(request.app.state, "db", None)
    if manager is None:
        raise RuntimeError("Database not initialized")
    async with manager.session() as session:
        yield session


# ── Error Translation ─────────────────────────────────────────────────────
def db_operation(message: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator for service methods that touch the database.

    Application errors (IdeaHubError) pass through untouched; any SQLAlchemy
    failure is logged with its type and re-raised as DatabaseError(message).

    Usage:
        @db_operation("Could not retrieve comments")
        async def list_comments(self, db, idea_id): ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except IdeaHubError:
                raise
            except SQLAlchemyError as e:
                logger.error("Database error in %s: %s", func.__qualname__, str(e), exc_info=True)
                raise DatabaseError(
                    message=message,
                    context={"operation": func.__qualname__, "error_type": type(e).__name__},
                ) from e

        return wrapper

    return decorator
