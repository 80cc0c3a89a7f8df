"""KeyStore: API key issuance and validation.

Keys are stored as SHA-256 fingerprints. The raw secret is returned once, at
issuance, and afterwards only ever arrives from callers as a bearer token.
The store is tier-agnostic: it compares the stored level against whatever
threshold the caller asks for. Collaborators use two tiers,
:data:`PERMISSION_READ` and :data:`PERMISSION_ADMIN`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from asset_catalog.engine.models import ApiKey, utcnow
from asset_catalog.engine.models.catalog import OWNER_REF_MAX
from asset_catalog.engine.records import ApiKeyRecord, Identity
from asset_catalog.errors.catalog_errors import InvalidInputError
from asset_catalog.errors.definitions import ErrApiKeyConflict
from asset_catalog.utils.crypto import fingerprint, generate_secret

if TYPE_CHECKING:
    from asset_catalog.datastore.client import Datastore

logger = logging.getLogger(__name__)

PERMISSION_READ = 1
PERMISSION_ADMIN = 999


class KeyStore:
    """Persists API keys and validates presented secrets."""

    def __init__(
        self,
        datastore: Datastore,
        *,
        default_rate_limit: int = 60,
        issue_attempts: int = 3,
    ) -> None:
        self._ds = datastore
        self._default_rate_limit = default_rate_limit
        self._issue_attempts = issue_attempts

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def issue(
        self,
        description: str,
        permission_level: int,
        owner_ref: str | None = None,
        rate_limit: int | None = None,
        active: bool = True,
    ) -> tuple[ApiKeyRecord, str]:
        """Issue a new key.

        Args:
            description: Free-text note about the key.
            permission_level: Stored level; higher is more privileged.
            owner_ref: Optional external owner identifier.
            rate_limit: Requests per minute. Defaults to the configured value.
            active: Whether the key can be used right away.

        Returns:
            Tuple of (stored key record, raw secret). The raw secret is
            returned ONLY here and cannot be recovered later.

        Raises:
            InvalidInputError: On a negative level or rate limit, or an
                over-long owner reference.
            CatalogError: ``ErrApiKeyConflict`` if no unique fingerprint could
                be stored within the configured number of attempts.
        """
        if permission_level < 0:
            msg = "permission_level cannot be negative"
            raise InvalidInputError(msg, code="invalid-permission-level")
        if rate_limit is None:
            rate_limit = self._default_rate_limit
        if rate_limit < 0:
            msg = "rate_limit cannot be negative"
            raise InvalidInputError(msg, code="invalid-rate-limit")
        if owner_ref is not None and len(owner_ref) > OWNER_REF_MAX:
            msg = f"owner_ref cannot exceed {OWNER_REF_MAX} characters"
            raise InvalidInputError(msg, code="field-too-long")

        for attempt in range(1, self._issue_attempts + 1):
            secret = generate_secret()
            row = ApiKey(
                key_fingerprint=fingerprint(secret),
                description=description,
                permission_level=permission_level,
                owner_ref=owner_ref,
                rate_limit=rate_limit,
                active=active,
                created_at=utcnow(),
                last_used_at=None,
            )
            try:
                async with self._ds.transaction() as session:
                    session.add(row)
            except IntegrityError:
                logger.warning(
                    "API key fingerprint collision, regenerating (attempt %d/%d)",
                    attempt,
                    self._issue_attempts,
                )
                continue

            logger.info("Issued API key %d (level %d)", row.id, row.permission_level)
            return ApiKeyRecord.from_model(row), secret

        raise ErrApiKeyConflict

    async def validate(
        self, raw_secret: str | None, min_permission: int = PERMISSION_READ
    ) -> Identity | None:
        """Check a presented secret against the stored keys.

        Succeeds only if a key with the same fingerprint exists, is active,
        and its level is at least *min_permission*. On success the key's
        ``last_used_at`` is refreshed in the same transaction.

        Returns:
            The caller's :class:`Identity`, or None. The reason for a denial
            is never reported.
        """
        if not raw_secret:
            return None

        fp = fingerprint(raw_secret)
        async with self._ds.transaction() as session:
            result = await session.execute(select(ApiKey).where(ApiKey.key_fingerprint == fp))
            key = result.scalar_one_or_none()
            if key is None or not key.active or key.permission_level < min_permission:
                return None

            key.last_used_at = utcnow()
            return Identity(
                key_id=key.id,
                permission_level=key.permission_level,
                rate_limit=key.rate_limit,
                token=raw_secret,
            )

    async def get_by_id(self, key_id: int) -> ApiKeyRecord | None:
        """Look up a key record by its numeric id."""
        async with self._ds.session() as session:
            key = await session.get(ApiKey, key_id)
            return ApiKeyRecord.from_model(key) if key is not None else None

    async def ensure_key(
        self,
        secret: str,
        description: str,
        permission_level: int,
        rate_limit: int = 0,
    ) -> ApiKeyRecord:
        """Make sure a key for a known *secret* exists with *permission_level*.

        Used to bootstrap the configured administrative key. An existing key
        is reactivated and its level updated; nothing else changes.
        """
        fp = fingerprint(secret)
        try:
            async with self._ds.transaction() as session:
                result = await session.execute(select(ApiKey).where(ApiKey.key_fingerprint == fp))
                key = result.scalar_one_or_none()
                if key is None:
                    key = ApiKey(
                        key_fingerprint=fp,
                        description=description,
                        permission_level=permission_level,
                        rate_limit=rate_limit,
                        active=True,
                        created_at=utcnow(),
                    )
                    session.add(key)
                    logger.info("Stored bootstrap API key (level %d)", permission_level)
                else:
                    key.permission_level = permission_level
                    key.active = True
        except IntegrityError:
            # Another process stored it first.
            async with self._ds.session() as session:
                result = await session.execute(select(ApiKey).where(ApiKey.key_fingerprint == fp))
                key = result.scalar_one()
        return ApiKeyRecord.from_model(key)
