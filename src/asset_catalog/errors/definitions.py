"""Predefined error instances for the catalog and its HTTP surface."""

from __future__ import annotations

from asset_catalog.errors.catalog_errors import CatalogError, InvalidInputError

# -- Authentication --------------------------------------------------------

# Deliberately uninformative: never says which check failed.
ErrUnauthorized = CatalogError("unauthorized", status_code=401, code="unauthorized")
ErrRateLimited = CatalogError("rate limit exceeded", status_code=429, code="rate-limited")

# -- Validation ------------------------------------------------------------

ErrInvalidInput = InvalidInputError("invalid input")
ErrInvalidLimit = InvalidInputError("limit must be a positive integer", code="invalid-limit")
ErrInvalidTagName = InvalidInputError(
    "tag name must be between 1 and 50 characters", code="invalid-tag-name"
)
ErrMissingQuery = InvalidInputError("missing search query", code="missing-query")

# -- Not Found -------------------------------------------------------------

ErrAssetNotFound = CatalogError("asset not found", status_code=404, code="asset-not-found")
ErrTagNotFound = CatalogError("tag not found", status_code=404, code="tag-not-found")
ErrTypeNotFound = CatalogError("type not found", status_code=404, code="type-not-found")
ErrApiKeyNotFound = CatalogError("api key not found", status_code=404, code="api-key-not-found")

# -- Conflict --------------------------------------------------------------

ErrTagConflict = CatalogError("tag name already in use", status_code=409, code="tag-conflict")
ErrApiKeyConflict = CatalogError(
    "could not store a unique api key", status_code=409, code="api-key-conflict"
)

# -- Approval --------------------------------------------------------------

ErrAlreadyApproved = CatalogError(
    "asset is already approved", status_code=409, code="already-approved"
)
ErrAssetFrozen = CatalogError(
    "asset is approved and can no longer be edited", status_code=409, code="asset-frozen"
)
