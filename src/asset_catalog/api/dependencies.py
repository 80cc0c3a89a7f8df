"""FastAPI dependency injection helpers.

Provides ``Depends()``-compatible callables for engine access and
authentication in route handlers.

Usage in a route::

    @router.get("/assets")
    async def list_assets(
        _: Annotated[Identity, Depends(require_reader)],
        engine: Annotated[CatalogEngine, Depends(get_engine)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from asset_catalog.api.middleware.auth import authenticate_request, enforce_rate_limit
from asset_catalog.engine.client import CatalogEngine  # noqa: TC001
from asset_catalog.engine.records import Identity  # noqa: TC001
from asset_catalog.engine.services.key_store import PERMISSION_ADMIN, PERMISSION_READ
from asset_catalog.errors.definitions import ErrUnauthorized

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def get_engine(request: Request) -> CatalogEngine:
    """Retrieve the engine from ``app.state``.

    The engine is stored on ``app.state.engine`` during lifespan startup.

    Raises:
        ErrUnauthorized: If the engine is not initialized (should never happen
        after startup).
    """
    engine: CatalogEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        raise ErrUnauthorized
    return engine


# ---------------------------------------------------------------------------
# Auth tiers
# ---------------------------------------------------------------------------


async def require_reader(
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Any active key with read permission, within its rate limit."""
    identity = await authenticate_request(
        engine, authorization=authorization, min_permission=PERMISSION_READ
    )
    enforce_rate_limit(engine, identity)
    return identity


async def require_admin(
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """An active administrative key, within its rate limit."""
    identity = await authenticate_request(
        engine, authorization=authorization, min_permission=PERMISSION_ADMIN
    )
    enforce_rate_limit(engine, identity)
    return identity
