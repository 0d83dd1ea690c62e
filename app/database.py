import logging
from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.middleware import install_query_counter

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless enabled per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Persistence handle owning the async engine and the session factory.

    One instance is built at process start (see the lifespan in
    ``app.main``), stored on ``app.state.db`` and disposed at shutdown.
    Tests build their own instance against an in-memory SQLite engine.
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, pool_pre_ping=True, **engine_kwargs
        )
        # Register the per-request SQL query counter on this engine.
        install_query_counter(self.engine)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close every pooled connection.  Called once at shutdown."""
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Request-scoped session: one transaction per request.

    Commits when the handler returns normally and rolls back on any
    exception, so multi-step service operations land atomically.
    """
    db: Database = request.app.state.db
    async with db.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
