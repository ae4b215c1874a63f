"""Database package."""

from ppc_contracts.db.session import (
    AsyncSessionLocal,
    Base,
    SyncSessionLocal,
    async_engine,
    get_db_dependency,
    get_sync_db,
    init_db,
    sync_engine,
)

__all__ = [
    "AsyncSessionLocal",
    "Base",
    "SyncSessionLocal",
    "async_engine",
    "get_db_dependency",
    "get_sync_db",
    "init_db",
    "sync_engine",
]
