"""API middleware: auth, rate limiting, CORS."""

from asset_catalog.api.middleware.auth import authenticate_request, enforce_rate_limit
from asset_catalog.api.middleware.cors import setup_cors

__all__ = ["authenticate_request", "enforce_rate_limit", "setup_cors"]
