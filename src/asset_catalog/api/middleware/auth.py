"""Bearer-token authentication and per-key rate limiting.

A request is authenticated against the key store (fingerprint, active flag,
permission tier), then charged against the caller's rate-limit window. Both
failures are reported without saying which check failed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asset_catalog.errors.definitions import ErrRateLimited, ErrUnauthorized

if TYPE_CHECKING:
    from asset_catalog.engine.client import CatalogEngine
    from asset_catalog.engine.records import Identity

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
AUTH_SCHEME = "bearer"


def parse_bearer(header_value: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Returns:
        The token, or None if the header is absent or uses another scheme.
    """
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != AUTH_SCHEME:
        return None
    token = token.strip()
    return token or None


async def authenticate_request(
    engine: CatalogEngine,
    *,
    authorization: str | None,
    min_permission: int,
) -> Identity:
    """Validate the bearer token for the required permission tier.

    Raises:
        CatalogError: ``ErrUnauthorized`` for a missing, unknown, inactive or
            under-privileged key.
    """
    token = parse_bearer(authorization)
    identity = await engine.key_store.validate(token, min_permission)
    if identity is None:
        if engine.metrics is not None:
            engine.metrics.record_auth_denied(min_permission)
        raise ErrUnauthorized
    return identity


def enforce_rate_limit(engine: CatalogEngine, identity: Identity) -> None:
    """Charge one request to the caller's window.

    The key's own ``rate_limit`` is the budget when positive; otherwise the
    configured default applies.

    Raises:
        CatalogError: ``ErrRateLimited`` when the window's budget is spent.
    """
    if not engine.config.rate_limit.enabled:
        return
    budget = identity.rate_limit if identity.rate_limit > 0 else None
    if not engine.rate_limiter.allow(identity.rate_limit_key, budget):
        if engine.metrics is not None:
            engine.metrics.record_rate_limited()
        logger.debug("Key %d rate limited", identity.key_id)
        raise ErrRateLimited
