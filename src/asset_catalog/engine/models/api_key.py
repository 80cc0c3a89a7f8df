"""ApiKey model: fingerprinted bearer secrets with a permission level."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - SQLAlchemy needs this at runtime for Mapped[datetime]

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from asset_catalog.engine.models.base import Base, utcnow


class ApiKey(Base):
    """Stored API key.

    Only the SHA-256 fingerprint of the raw secret is kept; the secret itself
    is handed to the issuer once and never persisted.
    """

    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key_fingerprint: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, comment="SHA-256 hex of the raw secret"
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    permission_level: Mapped[int] = mapped_column(Integer, nullable=False)
    owner_ref: Mapped[str | None] = mapped_column(String(50), nullable=True, default=None)
    rate_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<ApiKey id={self.id} level={self.permission_level} active={self.active}>"
