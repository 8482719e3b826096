"""Engine and session plumbing for the PostgreSQL user store.

Every tenant's :class:`SqlUserStore` shares one engine and one session
factory per process. Both are built on first use, so importing this module
(or running with the in-memory backend) never opens a connection.

The engine pings pooled connections before handing them out, recycles them
hourly and bounds each statement with an asyncpg command timeout.
"""

import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tenantry.core.config import DatabaseConfig, get_settings
from tenantry.infrastructure.constants import (
    COMMAND_TIMEOUT_SECONDS,
    POOL_RECYCLE_SECONDS,
)
from tenantry.infrastructure.database.base import Base


def create_database_engine(config: DatabaseConfig | None = None) -> AsyncEngine:
    """Build a pooled async engine.

    Args:
        config: Database section of the settings; read from
            :func:`get_settings` when omitted.

    Returns:
        AsyncEngine: An engine that has not connected yet.
    """
    config = config or get_settings().database_config
    engine = create_async_engine(
        config.database_url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_pre_ping=config.pool_pre_ping,
        pool_recycle=POOL_RECYCLE_SECONDS,
        connect_args={
            # JIT compilation only slows down short OLTP statements
            "server_settings": {"jit": "off"},
            "command_timeout": COMMAND_TIMEOUT_SECONDS,
        },
    )
    logger.info(
        "Database engine ready (pool_size={}, max_overflow={})",
        config.pool_size,
        config.max_overflow,
    )
    return engine


class _EngineHolder:
    """Process-wide engine and session factory, created lazily."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = create_database_engine()
        return self._engine

    @property
    def sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._sessions is None:
            engine = self.engine
            with self._lock:
                if self._sessions is None:
                    # Records are read after commit, so keep attributes loaded
                    self._sessions = async_sessionmaker(
                        engine, class_=AsyncSession, expire_on_commit=False
                    )
        return self._sessions

    async def dispose(self) -> None:
        """Close pooled connections and drop both singletons."""
        engine, self._engine, self._sessions = self._engine, None, None
        if engine is not None:
            await engine.dispose()
            logger.info("Database engine disposed")

    def forget(self) -> None:
        """Drop both singletons without closing anything. For tests."""
        self._engine = None
        self._sessions = None


_holder = _EngineHolder()


def get_engine() -> AsyncEngine:
    """The shared engine."""
    return _holder.engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """The shared session factory."""
    return _holder.sessions


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Run a block in one transaction.

    The transaction commits when the block exits normally. Any exception
    rolls it back and propagates unchanged.

    Yields:
        AsyncSession: The session bound to the transaction.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.debug("Transaction rolled back")
            raise


async def init_models() -> None:
    """Create the tables that do not exist yet."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_database() -> None:
    """Dispose the shared engine. Called on application shutdown."""
    await _holder.dispose()


async def check_database_connection() -> tuple[bool, str | None]:
    """Run ``SELECT 1`` against the database.

    Returns:
        tuple[bool, str | None]: ``(True, None)`` when the database answered,
            otherwise ``(False, <driver error>)``.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.scalar(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return False, str(exc)
    return True, None
