# app/db/session.py
import sys
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import create_engine as create_sync_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import get_settings
from app.db.base import Base

# Import ORM models so that Base.metadata is aware of them
from app.models import daily_log, employee, notification, project, user  # noqa: F401

settings = get_settings()

# Detect if we're running under pytest
IS_TEST = "pytest" in sys.modules

# ---------------------------------------------------------------------------
# Main application engine + session
# ---------------------------------------------------------------------------
_engine_kwargs: dict[str, Any] = {"echo": False, "future": True}
if IS_TEST:
    # Tests mix TestClient's loop with pytest-asyncio loops, so never reuse
    # connections across them.
    _engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(settings.DB_URL, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """
    SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    per connection.
    """
    module = type(dbapi_connection).__module__
    if "sqlite" not in module:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async SQLAlchemy session.

    The session is automatically closed when the request is completed.
    """
    async with AsyncSessionLocal() as session:
        yield session


# ---------------------------------------------------------------------------
# PRODUCTION / DEV: DB init for app startup
# ---------------------------------------------------------------------------
async def init_db_for_startup() -> None:
    """
    Initialize DB schema for application startup.

    Creates missing tables only; existing data is left untouched.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ---------------------------------------------------------------------------
# TESTS ONLY: reset schema using a SYNC engine
# ---------------------------------------------------------------------------

def _build_sync_db_url(async_url: str) -> str:
    """
    Convert an async driver URL to its synchronous counterpart so DDL can run
    outside any event loop:

    - 'postgresql+asyncpg://...' -> 'postgresql://...'
    - 'sqlite+aiosqlite://...'   -> 'sqlite://...'
    """
    for async_driver in ("+asyncpg", "+aiosqlite"):
        if async_driver in async_url:
            return async_url.replace(async_driver, "")
    return async_url


def reset_schema_sync() -> None:
    """
    Run drop_all + create_all using a synchronous SQLAlchemy engine.

    Do NOT call this from production code. Only from tests/fixtures.
    """
    sync_url = _build_sync_db_url(settings.DB_URL)
    sync_engine = create_sync_engine(sync_url, future=True)

    with sync_engine.begin() as conn:
        Base.metadata.drop_all(bind=conn)
        Base.metadata.create_all(bind=conn)

    sync_engine.dispose()
