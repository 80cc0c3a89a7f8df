"""Schema creation and reference-data seeding.

Tables are created from the ORM metadata; asset types are reference data the
catalog never mutates, so they are seeded here at startup.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from asset_catalog.engine.models.base import Base

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


async def run_auto_migrate(engine: AsyncEngine) -> None:
    """Create all tables defined by ORM models.

    Args:
        engine: The async SQLAlchemy engine to migrate.
    """
    # Import all models to register them with Base.metadata
    import asset_catalog.engine.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_types(engine: AsyncEngine, names: Iterable[str]) -> list[str]:
    """Insert any asset type from *names* that is not stored yet.

    Returns:
        The names that were inserted.
    """
    from asset_catalog.engine.models.catalog import AssetType

    wanted = [n for n in dict.fromkeys(n.strip() for n in names) if n]
    if not wanted:
        return []

    async with engine.begin() as conn:
        result = await conn.execute(select(AssetType.name).where(AssetType.name.in_(wanted)))
        present = set(result.scalars().all())
        missing = [n for n in wanted if n not in present]
        if missing:
            await conn.execute(AssetType.__table__.insert(), [{"name": n} for n in missing])

    if missing:
        logger.info("Seeded asset types: %s", ", ".join(missing))
    return missing
