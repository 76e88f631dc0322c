"""Async SQLAlchemy engine and sessions for the season snapshot database.

    engine = create_engine(settings.database_url)
    await create_tables(engine)
    async with get_session(engine) as session:
        await Repository(session).store_snapshot(...)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fantasy_bakes.db.models import Base

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT = 15


def create_engine(database_url: str, busy_timeout: int = DEFAULT_BUSY_TIMEOUT) -> AsyncEngine:
    """Create an async engine for a SQLite snapshot database.

    Two admins saving scores at the same moment both append a snapshot row;
    ``busy_timeout`` (seconds) makes the second writer wait for the first
    instead of failing. File databases run in WAL mode so leaderboard reads are
    not blocked by a save in progress.
    """
    in_memory = make_url(database_url).database in (None, "", ":memory:")
    engine = create_async_engine(database_url, connect_args={"timeout": busy_timeout})

    @event.listens_for(engine.sync_engine, "connect")
    def _configure_connection(dbapi_conn: object, connection_record: object) -> None:
        cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout * 1000)}")
        cursor.close()

    logger.info("db_engine_created url=%s in_memory=%s", engine.url, in_memory)
    return engine


_session_factories: dict[AsyncEngine, async_sessionmaker[AsyncSession]] = {}


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to *engine*, building it on first use."""
    factory = _session_factories.get(engine)
    if factory is None:
        factory = async_sessionmaker(engine, expire_on_commit=False)
        _session_factories[engine] = factory
    return factory


@asynccontextmanager
async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """One unit of work: commit when the block exits cleanly, roll back otherwise."""
    async with create_session_factory(engine)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(engine: AsyncEngine) -> None:
    """Create the snapshot table if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db_tables_ready url=%s", engine.url)
