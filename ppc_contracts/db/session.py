"""Engines and sessions for the contract store.

Routes and worker activities share the sync engine: signing writes are short
conditional UPDATEs that must commit before the response goes out. The async
engine only creates tables at startup and answers the readiness probe.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ppc_contracts.core.config import settings


class Base(DeclarativeBase):
    pass


# (sync prefix, async prefix)
_DRIVERS = (
    ("postgresql://", "postgresql+asyncpg://"),
    ("sqlite://", "sqlite+aiosqlite://"),
)


def _to_async_url(url: str) -> str:
    for sync_prefix, async_prefix in _DRIVERS:
        if url.startswith(sync_prefix):
            return async_prefix + url[len(sync_prefix):]
    return url


def _to_sync_url(url: str) -> str:
    for sync_prefix, async_prefix in _DRIVERS:
        if url.startswith(async_prefix):
            return sync_prefix + url[len(async_prefix):]
    return url


async_engine = create_async_engine(_to_async_url(settings.DATABASE_URL), pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)

sync_engine = create_engine(_to_sync_url(settings.DATABASE_URL), pool_pre_ping=True)
SyncSessionLocal = sessionmaker(sync_engine, autocommit=False, autoflush=False)


async def init_db() -> None:
    """Create missing tables; schema changes go through Alembic."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@contextmanager
def get_sync_db() -> Iterator[Session]:
    """Unit of work for worker activities: commit on success, roll back on error."""
    db = SyncSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db_dependency() -> Iterator[Session]:
    """Request-scoped session. Routes and SigningStore commit explicitly."""
    db = SyncSessionLocal()
    try:
        yield db
    finally:
        db.close()
