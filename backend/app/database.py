"""Database engine, session factory, and declarative base.

One DeclarativeBase for the catalog tables (products, suppliers) and one
session dependency for FastAPI:
  - get_db()  → request-scoped AsyncSession, rolled back on error

Services own their unit of work and commit explicitly through the
CatalogStore, so get_db() only guarantees that nothing half-written
survives an exception. A cancelled request never reaches commit; closing
the session releases the connection and discards the open transaction.
"""

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import settings

_SQLITE_BUSY_TIMEOUT_SECONDS = 30


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, with SQLite tuned for concurrent writers."""
    db_url = make_url(url)
    if db_url.get_backend_name() != "sqlite":
        return create_async_engine(url, echo=echo, pool_size=20, max_overflow=10)

    kwargs: dict[str, object] = {
        "connect_args": {"timeout": _SQLITE_BUSY_TIMEOUT_SECONDS},
    }
    if db_url.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_async_engine(url, echo=echo, **kwargs)

    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    return engine


engine = build_engine(settings.database_url, echo=settings.debug)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """Catalog models (products, suppliers)."""
    pass


# ── Session dependency ──────────────────────────────────────

async def get_db() -> AsyncSession:
    """Yield a request-scoped session."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
