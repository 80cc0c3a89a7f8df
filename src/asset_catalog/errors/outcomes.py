"""Mutation outcomes returned by the catalog store.

Every mutation returns an :class:`Outcome` instead of raising, so callers can
treat "already approved" as a no-op and map the rest onto their own status
codes. :data:`OUTCOME_ERRORS` is the default mapping used by the HTTP layer.
"""

from __future__ import annotations

import enum

from asset_catalog.errors.catalog_errors import CatalogError
from asset_catalog.errors.definitions import (
    ErrAlreadyApproved,
    ErrAssetNotFound,
    ErrTagConflict,
)


class Outcome(enum.StrEnum):
    """Result of a catalog mutation."""

    OK = "ok"
    NOT_FOUND = "not-found"
    CONFLICT = "conflict"
    ALREADY_APPROVED = "already-approved"
    # Alias: a frozen field edit is rejected with the same value as re-approval.
    FROZEN = "already-approved"


OUTCOME_ERRORS: dict[Outcome, CatalogError] = {
    Outcome.NOT_FOUND: ErrAssetNotFound,
    Outcome.CONFLICT: ErrTagConflict,
    Outcome.ALREADY_APPROVED: ErrAlreadyApproved,
}


def raise_for_outcome(
    outcome: Outcome,
    *,
    not_found: CatalogError | None = None,
    rejected: CatalogError | None = None,
) -> None:
    """Raise the error matching a non-OK outcome.

    Args:
        outcome: The mutation result.
        not_found: Override for ``NOT_FOUND`` (e.g. tag vs asset).
        rejected: Override for ``ALREADY_APPROVED`` / ``FROZEN``.

    Raises:
        CatalogError: For every outcome other than ``OK``.
    """
    if outcome is Outcome.OK:
        return
    if outcome is Outcome.NOT_FOUND and not_found is not None:
        raise not_found
    if outcome is Outcome.ALREADY_APPROVED and rejected is not None:
        raise rejected
    raise OUTCOME_ERRORS[outcome]
