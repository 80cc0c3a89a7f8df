"""Datastore: owns the async engine and hands out sessions.

Catalog services never build engines themselves. Reads use a plain
:meth:`Datastore.session`; every mutation goes through
:meth:`Datastore.transaction` so it commits or rolls back as a unit.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from asset_catalog.datastore.engines import create_engine

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from asset_catalog.config.settings import DatabaseConfig

_ERR_NOT_OPEN = "Datastore is not open. Call open() first."


class Datastore:
    """Async engine plus session factory for one database.

    Usage::

        ds = Datastore(db_config)
        await ds.open()
        async with ds.transaction() as session:
            session.add(row)
        await ds.close()
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """The underlying async engine.

        Raises:
            RuntimeError: If the datastore is not open.
        """
        if self._engine is None:
            raise RuntimeError(_ERR_NOT_OPEN)
        return self._engine

    @property
    def dialect(self) -> str:
        """Dialect name of the open engine (``sqlite`` or ``postgresql``)."""
        return self.engine.dialect.name

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        """Create the engine and session factory. Schema setup is separate."""
        if self._engine is not None:
            return
        self._engine = create_engine(self._config)
        # Records are built from rows after commit.
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

    async def close(self) -> None:
        """Dispose the engine and release pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None

    def session(self) -> AsyncSession:
        """A new session for read-only work. Use as an async context manager.

        Raises:
            RuntimeError: If the datastore is not open.
        """
        if self._sessions is None:
            raise RuntimeError(_ERR_NOT_OPEN)
        return self._sessions()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """A session inside one transaction.

        Commits when the block exits normally and rolls back if it raises.
        Returning early from the block still commits what was done.
        """
        async with self.session() as session, session.begin():
            yield session
