"""Shared test fixtures for the asset-catalog test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from asset_catalog.config.settings import DatabaseEngine

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from asset_catalog.engine.client import CatalogEngine

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def admin_key() -> str:
    """Raw secret of the bootstrap administrative key."""
    return ADMIN_KEY


@pytest.fixture
def app_config(admin_key):
    """Provide a test AppConfig backed by in-memory SQLite."""
    from asset_catalog.config.settings import AppConfig, DatabaseConfig

    return AppConfig(
        debug=True,
        admin_key=admin_key,
        db=DatabaseConfig(
            engine=DatabaseEngine.SQLITE,
            dsn="sqlite+aiosqlite:///:memory:",
        ),
    )


@pytest.fixture
async def engine(app_config) -> AsyncIterator[CatalogEngine]:
    """An initialized engine with tables created and types seeded."""
    from asset_catalog.engine.client import CatalogEngine

    eng = CatalogEngine(app_config)
    await eng.initialize()
    yield eng
    await eng.close()


@pytest.fixture
def test_client(app_config):
    """Provide a FastAPI TestClient with the app wired to test config."""
    from fastapi.testclient import TestClient

    from asset_catalog.api.app import create_app

    app = create_app(config=app_config)
    return TestClient(app, raise_server_exceptions=False)
