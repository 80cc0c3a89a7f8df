"""CORS middleware configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from asset_catalog.api.middleware.auth import AUTH_HEADER

if TYPE_CHECKING:
    from fastapi import FastAPI


def setup_cors(app: FastAPI) -> None:
    """Allow any origin to call the read API with a bearer token.

    Credentials (cookies) are not used, so wildcard origins are safe here.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=[AUTH_HEADER, "Content-Type"],
    )
