"""Application entry point for the asset catalog server."""

from __future__ import annotations

import logging
import os

import uvicorn

from asset_catalog.config.settings import AppConfig


def main() -> None:
    """Start the asset catalog server."""
    config = AppConfig()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    reload = os.getenv("CATALOG_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "asset_catalog.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
