"""CatalogError: base exception class for all asset-catalog errors."""

from __future__ import annotations


class CatalogError(Exception):
    """Base error for all catalog operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "catalog-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class InvalidInputError(CatalogError):
    """Malformed identifiers or out-of-range values, rejected before storage."""

    def __init__(self, message: str, *, code: str = "invalid-input") -> None:
        super().__init__(message, status_code=400, code=code)
