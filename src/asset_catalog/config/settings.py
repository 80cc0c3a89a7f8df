"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``CATALOG_``, nested via ``__``)
2. YAML config file (``config_path`` field or ``CATALOG_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class DatabaseEngine(enum.StrEnum):
    """Supported database engines."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_SERVER__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080


class DatabaseConfig(BaseSettings):
    """Database settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_DB__",
        case_sensitive=False,
    )

    engine: DatabaseEngine = Field(
        default=DatabaseEngine.SQLITE,
        description="Database backend: sqlite or postgresql",
    )
    dsn: str = Field(
        default="sqlite+aiosqlite:///./asset_catalog.db",
        description="Async database connection string",
    )
    max_idle_connections: int = 5
    max_open_connections: int = 10
    pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a pooled connection before failing",
    )
    debug_sql: bool = False


class RateLimitConfig(BaseSettings):
    """Fixed-window rate limiter settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_RATE_LIMIT__",
        case_sensitive=False,
    )

    enabled: bool = True
    window_seconds: int = Field(default=60, ge=1)
    default_limit: int = Field(default=60, ge=1)


class KeyConfig(BaseSettings):
    """API key issuance settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_KEYS__",
        case_sensitive=False,
    )

    default_rate_limit: int = Field(default=60, ge=0)
    issue_attempts: int = Field(default=3, ge=1)


class CatalogConfig(BaseSettings):
    """Catalog behaviour settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_CATALOG__",
        case_sensitive=False,
    )

    seed_types: list[str] = Field(default_factory=lambda: ["effect", "show"])
    search_limit: int = Field(default=50, ge=1)
    latest_limit: int = Field(default=50, ge=1)


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``CATALOG_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "0.1.0"
    log_level: str = "info"
    admin_key: str = Field(
        default="",
        description="Raw secret of the bootstrap administrative key (empty = none)",
    )
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    keys: KeyConfig = Field(default_factory=KeyConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                merged = {**val, **values[key]}
                values[key] = merged
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
