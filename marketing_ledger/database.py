"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support:

  - engine: The async database engine
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

Session lifecycle:
  Each API request gets its own session, and that session is the one
  database transaction for the whole ledger operation. It commits when the
  handler returns and rolls back on ANY exception, domain errors included.
  A rejected transaction therefore leaves balances and the transaction
  log exactly as they were.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from marketing_ledger.config import settings


def enable_sqlite_write_locks(async_engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction take the database write lock up front.

    The sqlite3 driver normally defers BEGIN until the first write, and
    SQLite ignores SELECT ... FOR UPDATE, so two requests could both read
    a card before either writes it. With the driver's own transaction
    handling switched off and BEGIN IMMEDIATE issued at the start of each
    transaction, the locking read blocks until any other writer commits
    and then sees its result.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

if engine.dialect.name == "sqlite":
    enable_sqlite_write_locks(engine)

# expire_on_commit=False prevents lazy-load errors after commit in async code
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/cards")
        async def list_cards(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
