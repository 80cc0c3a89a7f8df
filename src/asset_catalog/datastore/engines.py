"""Database engine factories: PostgreSQL, SQLite.

Provides async SQLAlchemy engine creation with support for:
- PostgreSQL (asyncpg driver)
- SQLite (aiosqlite driver) with foreign keys enforced and a Unicode-aware lower()
- Configurable pool sizes, pool timeout and echo/debug settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from asset_catalog.config.settings import DatabaseConfig


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def _configure_sqlite_connection(dbapi_connection: Any, _connection_record: Any) -> None:
    """Enforce foreign keys and make ``lower()`` fold non-ASCII letters.

    SQLite's built-in ``lower()`` only handles ASCII, so case-insensitive
    name search would miss names like ``Élan``.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from database configuration.

    Args:
        config: Database configuration with DSN, pool settings, etc.

    Returns:
        A configured ``AsyncEngine`` ready for use.
    """
    kwargs: dict = {
        "echo": config.debug_sql,
    }

    is_sqlite = "sqlite" in config.dsn

    # SQLite doesn't support pool settings in the same way
    if not is_sqlite:
        kwargs["pool_size"] = config.max_idle_connections
        kwargs["max_overflow"] = config.max_open_connections - config.max_idle_connections
        kwargs["pool_timeout"] = config.pool_timeout
        kwargs["pool_pre_ping"] = True

    engine = create_async_engine(config.dsn, **kwargs)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _configure_sqlite_connection)

    return engine
